"""Runs the Sparkle interpreter on a .sc file, or in command-line mode when no file is given. Installed as the
`sparkle` console script.
"""

import argparse
import sys

from sparkle.lang.error import ErrorHandler
from sparkle.lang.printer import AstPrinter
from sparkle.lang.session import Outcome, Session
from sparkle.lang.shell import Shell


def main(argv=None):
    """Runs sparkle interpreter. Returns the process exit code."""
    parser = argparse.ArgumentParser(prog="sparkle", description="Sparkle interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of file instead of running it")
    args = parser.parse_args(argv)

    if args.file is None:
        with ErrorHandler(fatal=False) as error_handler:
            Shell(Session(error_handler)).cmdloop()
        return Outcome.OK.value

    with ErrorHandler() as error_handler:
        sess = Session(error_handler)

        if args.ast:
            statements = sess.parse(Session.read(args.file))
            print(AstPrinter().print(statements))
            return Outcome.OK.value

        return sess.run_file(args.file).value


if __name__ == "__main__":
    sys.exit(main())
