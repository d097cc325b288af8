"""Uses the XMini Lexer/Parser/Evaluator pipeline to interpret .xm files or run in command-line mode. Also uses the
error handling context manager. Called from the xmini console script.
"""

import argparse
import sys

from xmini.lang.error import ErrorHandler
from xmini.lang.session import Session
from xmini.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="xmini", description="XMini interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--keep-going", action="store_true",
                        help="in command-line mode, report errors and continue with the next line instead of exiting")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs XMini interpreter. Called from xmini executable script. Any error is fatal unless --keep-going is given
    in command-line mode."""
    args = parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

        else:
            error_handler.fatal = not args.keep_going
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
