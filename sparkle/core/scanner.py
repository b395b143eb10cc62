"""Lexical analysis for Sparkle. Converts source text into a list of Tokens terminated by a single EOF token.

Lexical grammar, loosely:

```
<number>     ::= <digit>+ ( "." <digit>+ )?            ; unsigned, no exponent: "-" is a separate token
<string>     ::= '"' <any char except '"'>* '"'         ; no escapes, may span lines
<identifier> ::= [A-Za-z_] [A-Za-z0-9_]*                ; reserved words become keyword tokens
<comment>    ::= "//" <any char>* <newline>
               | "/*" ( <comment> | <any char> )* "*/"  ; block comments nest
```

Lexical errors are recorded in the Diagnostics object and scanning continues, so that every error of a source unit is
reported at once.
"""

from sparkle.lang.error import LexicalError
from sparkle.core.tokens import KEYWORDS, Token, TokenType


class Scanner:
    """Single-pass scanner over a source string."""
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
    # char: (type if followed by "=", type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }
    WHITESPACE = " \r\t"

    def __init__(self, source, diagnostics):
        self.source = source
        self.diagnostics = diagnostics
        self.tokens = []

        self.start = 0    # index of first char of the token being scanned
        self.current = 0  # index of next char to consume
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source. Returns the list of tokens."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Scanner.WHITESPACE:
            return
        elif char == "\n":
            self.line += 1
        elif char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])
        elif char in Scanner.DOUBLE:
            matched, alone = Scanner.DOUBLE[char]
            self.add_token(matched if self.match("=") else alone)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char == "\"":
            self.string()
        elif Scanner.is_digit(char):
            self.number()
        elif Scanner.is_alpha(char):
            self.identifier()
        else:
            self.diagnostics.error(self.line, f"Unexpected character '{char}'.", LexicalError)

    def block_comment(self):
        """Consumes a block comment whose opening "/*" was just consumed. Nested comments increase the depth."""
        depth = 1
        while depth > 0:
            if self.is_at_end():
                self.diagnostics.error(self.line, "Unterminated block comment.", LexicalError)
                return

            if self.peek() == "/" and self.peek_next() == "*":
                self.current += 2
                depth += 1
            elif self.peek() == "*" and self.peek_next() == "/":
                self.current += 2
                depth -= 1
            elif self.advance() == "\n":
                self.line += 1

    def string(self):
        while self.peek() != "\"" and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.diagnostics.error(self.line, "Unterminated string.", LexicalError)
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while Scanner.is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and Scanner.is_digit(self.peek_next()):
            self.advance()
            while Scanner.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while Scanner.is_alpha(self.peek()) or Scanner.is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"

    def is_at_end(self):
        return self.current >= len(self.source)

    def advance(self):
        self.current += 1
        return self.source[self.current - 1]

    def match(self, expected):
        """Consumes the next char if it is expected. Returns whether or not it was consumed."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        return "" if self.current + 1 >= len(self.source) else self.source[self.current + 1]

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))
