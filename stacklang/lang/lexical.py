"""Lexical analysis for the stack language. Converts raw source text into an ordered list of tokens in a single pass,
using one character of lookahead and no backtracking.

Tokens can be loosely defined as follows:

```
<keyword>    ::= "stack" | "out" | "in"
<type>       ::= "text" | "num"
<identifier> ::= <alpha> (<alpha> | "_")*     ; any other word
<number>     ::= <digit>+                     ; must fit in a signed 64-bit integer
<string>     ::= '"' <char>* '"'              ; no escapes at lex time, "\\n" is resolved when output
<operator>   ::= ":" | "<-" | "->" | "+" | "-" | "*" | "/"
```

Whitespace is skipped. Any other character becomes an Unknown token: lexing itself never fails on unexpected input.
"""

from stacklang.lang.error import Fault


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class Token:
    """Superclass of every token. value is the token's payload (None for tokens that carry nothing), text is the exact
    source lexeme, line and col are 1-based.
    """

    def __init__(self, value=None, text="", line=0, col=0):
        self.value = value
        self.text = text
        self.line = line
        self.col = col
        self._cls = type(self).__name__

    def __repr__(self):
        if self.value is None:
            return f"{self._cls}()"
        return f"{self._cls}({self.value!r})"

    def __str__(self):
        return self.text or self._cls

    def __eq__(self, other):
        # position is not compared
        return type(other) is type(self) and other.value == self.value

    def __hash__(self):
        return hash((self._cls, self.value))


class Stack(Token):
    """'stack' declaration keyword."""


class Out(Token):
    """'out' keyword."""


class In(Token):
    """'in' keyword."""


class Type(Token):
    """Builtin type name: 'text' or 'num'."""


class NumberLiteral(Token):
    pass


class StringLiteral(Token):
    pass


class Identifier(Token):
    pass


class Colon(Token):
    pass


class IntoStream(Token):
    """'<-', used both for assignment and for writing to output."""


Assign = IntoStream


class FromStream(Token):
    """'->', used for reading from input."""


class Add(Token):
    pass


class Sub(Token):
    pass


class Mul(Token):
    pass


class Del(Token):
    pass


class Unknown(Token):
    """Unrecognized character. Never handled by the parser."""


KEYWORDS = {"stack": Stack, "out": Out, "in": In}
TYPES = ("text", "num")
OPERATORS = {":": Colon, "+": Add, "*": Mul, "/": Del}
WHITESPACE = " \t\n\r"
DIGITS = "0123456789"


class Lexer:
    """Tokenizes a single source string. Faults collected while lexing that do not stop it are kept in warnings."""

    def __init__(self, source):
        self.source = source
        self.position = 0
        self.line = 1
        self.col = 1
        self.warnings = []

    def next_char(self):
        """Consumes and returns the next character, or None once the source is exhausted."""
        if self.position >= len(self.source):
            return None

        char = self.source[self.position]
        self.position += 1
        if char == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return char

    def peek_char(self):
        if self.position < len(self.source):
            return self.source[self.position]
        return None

    def lex_string(self, line, col):
        start = self.position
        while True:
            char = self.next_char()
            if char is None:
                value = self.source[start:self.position]
                token = StringLiteral(value, '"' + value, line, col)
                self.warnings.append(Fault("unterminated string literal", token=token))
                return token
            if char == '"':
                value = self.source[start:self.position - 1]
                return StringLiteral(value, f'"{value}"', line, col)

    def lex_number(self, first, line, col):
        digits = first
        while self.peek_char() is not None and self.peek_char() in DIGITS:
            digits += self.next_char()

        token = NumberLiteral(None, digits, line, col)
        number = int(digits)
        if not INT64_MIN <= number <= INT64_MAX:
            raise Fault("'{}' is not a valid 64-bit integer", digits, reason=Fault.MALFORMED_NUMBER, token=token)

        token.value = number
        return token

    def lex_identifier(self, first, line, col):
        word = first
        while self.peek_char() is not None and (self.peek_char().isalpha() or self.peek_char() == "_"):
            word += self.next_char()

        if word in KEYWORDS:
            return KEYWORDS[word](None, word, line, col)
        elif word in TYPES:
            return Type(word, word, line, col)
        return Identifier(word, word, line, col)

    def next_token(self):
        """Returns the next token, or None once the source is exhausted."""
        while True:
            line, col = self.line, self.col
            char = self.next_char()

            if char is None:
                return None
            elif char in WHITESPACE:
                continue

            elif char == "<" and self.peek_char() == "-":
                self.next_char()
                return IntoStream(None, "<-", line, col)
            elif char == "-" and self.peek_char() == ">":
                self.next_char()
                return FromStream(None, "->", line, col)
            elif char == "-":
                return Sub(None, char, line, col)
            elif char in OPERATORS:
                return OPERATORS[char](None, char, line, col)

            elif char == '"':
                return self.lex_string(line, col)
            elif char in DIGITS:
                return self.lex_number(char, line, col)
            elif char.isalpha():
                return self.lex_identifier(char, line, col)

            return Unknown(char, char, line, col)

    def tokenize(self):
        """Returns every token in the source, in order."""
        tokens = []
        token = self.next_token()
        while token is not None:
            tokens.append(token)
            token = self.next_token()
        return tokens


def tokenize(source):
    """Shorthand for Lexer(source).tokenize()."""
    return Lexer(source).tokenize()
