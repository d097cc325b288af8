"""Error handling for the XMini language. Only XMiniErrors should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Three kinds of error can be raised by the pipeline:
    1. LexicalError: unrecognized character, unterminated string, bad escape, malformed operator
    2. ParseError: statement or expression grammar violated
    3. EvaluationError: undefined variable, division/modulo by zero, operand type mismatch

Redeclaring a variable with `var` is the only non-fatal condition, and is reported with ErrorHandler.warn.
"""

import sys

from termcolor import colored


class XMiniError(Exception):
    """Templates an error message so that it can be rendered by ErrorHandler. expr is the source line the error
    originated from (if known), and start/end delimit the offending part of expr.
    """

    def __init__(self, msg, expr=None, start=0, end=-1, diagnosis=True, internal=False):
        super().__init__(msg)

        self.msg = msg
        self.expr = expr if expr is not None else ""
        self.start = start
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal

    def header(self):
        """First line of the rendered error, without color."""
        return self.msg

    def __str__(self):
        return self.header()


class LexicalError(XMiniError):
    """Raised by the Lexer. Always reported with the line and position it occurred at."""

    def __init__(self, msg, line, position, expr=None, length=1):
        super().__init__(msg, expr, start=position, end=position + max(length, 1))
        self.line = line
        self.position = position

    def header(self):
        return f"Error on line {self.line} at position {self.position}: {self.msg}"


class ParseError(XMiniError):
    """Raised by the Parser. token is the offending token."""

    def __init__(self, msg, token, expr=None):
        position = token.position if token.position is not None else 0
        super().__init__(msg, expr, start=position, end=position + max(len(token.text), 1),
                         diagnosis=token.position is not None)
        self.token = token


class EvaluationError(XMiniError):
    """Raised by the Evaluator: undefined variables, division by zero, type mismatches."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report XMini errors/warnings. If fatal, the
    process exits with status 1 after reporting an error.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream  # defaults to sys.stderr at print time, so that redirection is honored
        self.traceback = {}

    @property
    def _out(self):
        return self.stream if self.stream is not None else sys.stderr

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded, with a caret line underneath."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        expr = error.expr
        start = min(error.start, len(expr))
        end = max(min(error.end, len(expr)), start + 1)

        diagnosis = "  " + expr[:start]
        diagnosis += colored(expr[start:end], color, attrs=["bold"])
        diagnosis += expr[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, msg):
        """Prints a non-fatal warning."""
        warning_msg = self._location()
        warning_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + msg
        print(warning_msg, file=self._out)

    def throw(self, error):
        """Reports error, which must be an XMiniError, using self.traceback to name where it originated. Exits the
        process if self.fatal.
        """
        if isinstance(error, LexicalError):
            error_msg = error.header()
        else:
            error_msg = self._location()
            if error.internal:
                error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
            error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.header()
        print(error_msg, file=self._out)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error), file=self._out)

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.remove_line(path)

    def _location(self):
        """Returns '<file>:<line>: ' for the most recently registered line, or '' if there is none."""
        for path, (line, line_num) in reversed(list(self.traceback.items())):
            if line_num is not None:
                return colored(f"{path}:{line_num}: ", attrs=["bold"])
        return ""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(XMiniError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(XMiniError("maximum recursion depth exceeded: expression is nested too deeply"))
        elif exc_type is not None and issubclass(exc_type, XMiniError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(XMiniError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            sys.exit(1)  # internal errors are always fatal

        return not do_exit
