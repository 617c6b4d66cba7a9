"""Lexical analysis for Lox. The scanner walks the source text once, left to right, and produces the full token list
terminated by an EOF token. Errors are collected rather than raised, so one stray character does not hide the rest of
the file's problems.

Lexical grammar:

```
<number>     ::= <digit>+ ( "." <digit>+ )?       ; always a float; no ".5" or "5." forms
<string>     ::= '"' <any char except '"'>* '"'   ; no escapes, may span lines
<identifier> ::= <alpha> ( <alpha> | <digit> )*   ; <alpha> is [A-Za-z_]
<comment>    ::= "//" <any char except newline>*
```
"""

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import Diagnostic, LEXICAL


class Scanner:
    """Converts a source string into Tokens. Call scan_tokens once; errors are available afterwards."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
    }

    # first char: (second char, two-char type, one-char type)
    DOUBLE = {
        "!": ("=", TokenType.BANG_EQUAL, TokenType.BANG),
        "=": ("=", TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": ("=", TokenType.LESS_EQUAL, TokenType.LESS),
        ">": ("=", TokenType.GREATER_EQUAL, TokenType.GREATER),
        "&": ("&", TokenType.AND_AND, TokenType.AMPERSAND),
        "|": ("|", TokenType.OR_OR, TokenType.PIPE),
    }

    WHITESPACE = " \r\t"

    def __init__(self, source):
        self.source = source
        self.tokens = []
        self.errors = []

        self._start = 0
        self._current = 0
        self._line = 1

    def scan_tokens(self):
        """Scans the whole source. Returns the token list, which always ends with an EOF token."""
        while not self._is_at_end():
            self._start = self._current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self._line))
        return self.tokens

    def _scan_token(self):
        char = self._advance()

        if char in Scanner.SINGLE:
            self._add_token(Scanner.SINGLE[char])
        elif char in Scanner.DOUBLE:
            second, double, single = Scanner.DOUBLE[char]
            self._add_token(double if self._match(second) else single)
        elif char == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self._is_at_end():
                    self._advance()
            else:
                self._add_token(TokenType.SLASH)
        elif char in Scanner.WHITESPACE:
            pass
        elif char == "\n":
            self._line += 1
        elif char == '"':
            self._string()
        elif Scanner.is_digit(char):
            self._number()
        elif Scanner.is_alpha(char):
            self._identifier()
        else:
            self._error("Unexpected character.")

    def _string(self):
        while self._peek() != '"' and not self._is_at_end():
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._is_at_end():
            self._error("Unterminated string.")
            return

        self._advance()  # closing "
        self._add_token(TokenType.STRING, self.source[self._start + 1:self._current - 1])

    def _number(self):
        while Scanner.is_digit(self._peek()):
            self._advance()

        if self._peek() == "." and Scanner.is_digit(self._peek(1)):
            self._advance()
            while Scanner.is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self._start:self._current]))

    def _identifier(self):
        while Scanner.is_alphanumeric(self._peek()):
            self._advance()

        text = self.source[self._start:self._current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _is_at_end(self):
        return self._current >= len(self.source)

    def _advance(self):
        self._current += 1
        return self.source[self._current - 1]

    def _match(self, expected):
        """Consumes the next character only if it is expected."""
        if self._is_at_end() or self.source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _peek(self, ahead=0):
        """Returns the character ahead characters past the current one, or "\\0" past the end of the source."""
        idx = self._current + ahead
        if idx >= len(self.source):
            return "\0"
        return self.source[idx]

    def _add_token(self, token_type, literal=None):
        text = self.source[self._start:self._current]
        self.tokens.append(Token(token_type, text, literal, self._line))

    def _error(self, message):
        self.errors.append(Diagnostic(LEXICAL, self._line, message))

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"

    @staticmethod
    def is_alphanumeric(char):
        return Scanner.is_alpha(char) or Scanner.is_digit(char)
