"""Session control for the XMini language. Runs program text through the Lexer, Parser and Evaluator, either a whole
file at once (file interpretation mode) or line by line (command-line mode).
"""

from xmini.lang.error import ParseError, XMiniError
from xmini.lang.evaluator import Evaluator
from xmini.lang.lexical import Lexer
from xmini.lang.parser import Parser


class Session:
    """Governs an XMini session, with a single variable store shared by everything run in it."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, out=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.evaluator = Evaluator(out=out, error_handler=error_handler)
        self.to_exec = {}  # dict of line num: list of Statements to execute

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise XMiniError(f"'{path}' could not be opened", diagnosis=False)

            self.add(source, 1)

        elif not cmd_line:
            raise XMiniError("'<in>' is a reserved filename")

    @property
    def store(self):
        """Variable store of this session."""
        return self.evaluator.store

    def add(self, source, line_num):
        """Tokenizes and parses source, which starts at line line_num, and queues its statements. Execution is
        delayed until run is called. Returns the parsed statements.
        """
        self.error_handler.register_line(self.path, source.split("\n")[0], line_num)  # in case error is raised

        tokens = Lexer(source).tokenize()
        try:
            statements = Parser(tokens, source).parse()
        except ParseError as error:
            if error.token.line is not None:  # point traceback at the line the token is on
                self.error_handler.register_line(self.path, error.expr, line_num + error.token.line - 1)
            raise

        self.error_handler.remove_line(self.path)  # error was not raised

        if statements:
            self.to_exec[line_num] = statements
        return statements

    def run(self):
        """Runs this session's queued statements, in order. Will raise any errors that are encountered."""
        for line_num, statements in list(self.to_exec.items()):
            try:
                for statement in statements:
                    line = line_num + (statement.keyword.line or 1) - 1
                    self.error_handler.register_line(self.path, str(statement), line)
                    self.evaluator.execute(statement)
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)
