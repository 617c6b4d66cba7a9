"""Runs .lox files or the interactive shell, inside the error handling context manager. Called from the lox executable
script.
"""

import argparse
import os

from lox.lang.error import ErrorHandler, LoxException
from lox.lang.session import Report, Session
from lox.lang.shell import Shell


def read_source(path):
    try:
        with open(path, "r", encoding="utf-8") as file:
            return file.read()
    except OSError:
        raise LoxException("'{}' could not be opened", path)


def build_parser():
    parser = argparse.ArgumentParser(prog="lox", description="Lox tree-walking interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--tokens", action="store_true", help="print the scanned tokens instead of running")
    parser.add_argument("--ast", action="store_true", help="print the parsed syntax tree instead of running")
    parser.add_argument("--no-color", action="store_true", help="disable colored error messages")
    return parser


def main(argv=None):
    """Runs lox interpreter. Called from lox executable script."""
    args = build_parser().parse_args(argv)
    if args.no_color:
        os.environ["NO_COLOR"] = "1"  # honored by termcolor

    with ErrorHandler() as error_handler:
        sess = Session()

        if args.file is None:
            Shell(sess, error_handler).cmdloop()
            return

        source = read_source(args.file)

        if args.tokens:
            tokens, errors = sess.tokens(source)
            for token in tokens:
                print(token)
            error_handler.report(Report(errors))

        elif args.ast:
            tree, errors = sess.syntax(source)
            if tree:
                print(tree)
            error_handler.report(Report(errors))

        else:
            error_handler.report(sess.run(source))


if __name__ == "__main__":
    main()
