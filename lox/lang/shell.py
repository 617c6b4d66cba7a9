"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd
from collections import Counter

from lox.core.scanner import Scanner
from lox.core.tokens import TokenType
from lox.lang.error import LoxException


class Shell(cmd.Cmd):
    """Lox interpreter shell. Each complete line runs in the same session, so declarations carry over."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, error_handler, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.error_handler = error_handler
        self.error_handler.fatal = False

        self._tmp_line = ""

    @staticmethod
    def needs_more(source):
        """Whether source still has unclosed braces or parentheses, in which case the shell waits for more lines. Counts
        tokens, so brackets inside strings and comments do not count.
        """
        counts = Counter(token.type for token in Scanner(source).scan_tokens())
        return (counts[TokenType.LEFT_BRACE] > counts[TokenType.RIGHT_BRACE]
                or counts[TokenType.LEFT_PAREN] > counts[TokenType.RIGHT_PAREN])

    def default(self, line):
        """Runs arbitrary Lox source."""
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source = self._tmp_line + line + "\n"

            if Shell.needs_more(source):
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            self.error_handler.report(self.sess.run(source))

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically-typed language with closures and classes. Statements end \n"
              "with ';' and everything you define stays around for later lines.\n\n"
              "Try it out by typing 'fun add(a, b) { return a + b; }'. Next, try typing \n"
              "'print add(1, 2);'. This will print '3'. Leave with 'exit' or Ctrl-D.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit("")

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            with self.error_handler:
                raise LoxException("unrecognized token: '{}'", arg)
            return False
        return True
