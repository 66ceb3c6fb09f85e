"""Uses the stack language implementation to interpret source files or run in command-line mode. Also uses the error
handling context manager. Called from the `stack` console script.
"""

import argparse

from stacklang.lang.error import ErrorHandler
from stacklang.lang.session import Session
from stacklang.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="stack", description="Stack language interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")

    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", action="store_true", help="print the file's tokens instead of running it")
    dump.add_argument("--tree", action="store_true", help="print the file's syntax trees instead of running it")
    return parser


def main(argv=None):
    """Runs the stack language interpreter. Called from the `stack` console script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.file is None:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()
            return

        if args.tokens:
            error_handler.register_file(args.file)
            source = Session.read(args.file)
            error_handler.register_file(args.file, source)

            tokens, __ = Session.tokenize(source)
            for token in tokens:
                print(f"{token.line}:{token.col}\t{token!r}")
            return

        sess = Session(error_handler, args.file, cmd_line=False)
        if args.tree:
            for statement in sess.to_exec:
                print(statement.display())

        else:
            sess.run()


if __name__ == "__main__":
    main()
