"""Syntax tree generation for the stack language. The parser consumes the token list produced by the lexer and builds an
ordered list of statement trees.

All grammar can be loosely defined as follows:

```
<stmt>       ::= <stack_decl> | <output> | <input>
<stack_decl> ::= "stack" IDENT ":" TYPE ("<-" <literal>)?  ; uninitialized variables get their type's default value
<output>     ::= "out" "<-" <addition>
<addition>   ::= <term> ("+" <term>)*                      ; associating by left: a + b + c = ((a + b) + c)
<term>       ::= IDENT | STRING | NUMBER
<literal>    ::= STRING | NUMBER
<input>      ::= "in" "->" IDENT
```

Statement rules are tried in the order their classes are defined below. A rule that does not recognize the leading
token declines; a rule that recognizes it but not the rest of the statement faults.
"""

from abc import ABC, abstractmethod

from stacklang.lang import lexical
from stacklang.lang.error import Fault


class Expr(ABC):
    """Superclass representing any node of a stack language syntax tree."""

    def __init__(self, token=None):
        self.token = token  # token this node was built from (used for error messages)
        self._cls = type(self).__name__

    @property
    @abstractmethod
    def nodes(self):
        """Child nodes (or leaf values) of this node, in order."""

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Expr>(
            <Expr>(
                ...
                <Expr>(<value>)  # <-- leaf
            )
        )
        """
        if not any(isinstance(node, Expr) for node in self.nodes):
            return f"{'    ' * indents}{repr(self)}"

        result = f"{'    ' * indents}{self._cls}("
        for node in self.nodes:
            if isinstance(node, Expr):
                result += "\n" + node.display(indents + 1) + ","
            else:
                result += f"\n{'    ' * (indents + 1)}{node!r},"
        return result[:-1] + f"\n{'    ' * indents})"

    def __repr__(self):
        return f"{self._cls}({', '.join(repr(node) for node in self.nodes)})"

    def __eq__(self, other):
        pending = [(self, other)]
        while pending:
            left, right = pending.pop()
            if type(left) is not type(right):
                return False
            elif not isinstance(left, Expr):
                if left != right:
                    return False
            elif len(left.nodes) != len(right.nodes):
                return False
            else:
                pending.extend(zip(left.nodes, right.nodes))
        return True


class StringLiteral(Expr):

    def __init__(self, value, token=None):
        super().__init__(token)
        self.value = value

    @property
    def nodes(self):
        return [self.value]


class NumberLiteral(Expr):

    def __init__(self, value, token=None):
        super().__init__(token)
        self.value = value

    @property
    def nodes(self):
        return [self.value]


class Identifier(Expr):

    def __init__(self, name, token=None):
        super().__init__(token)
        self.name = name

    @property
    def nodes(self):
        return [self.name]


class Addition(Expr):
    """Binary '+'. Meaning depends on the runtime values of both sides (see runtime.py)."""

    def __init__(self, left, right, token=None):
        super().__init__(token)
        self.left = left
        self.right = right

    @property
    def nodes(self):
        return [self.left, self.right]

    def operands(self):
        """Returns every operand of this left-nested chain of additions, left to right."""
        operands = []
        expr = self
        while isinstance(expr, Addition):
            operands.append(expr.right)
            expr = expr.left
        operands.append(expr)
        return operands[::-1]

    def display(self, indents=0):
        """Left-nested additions are shown as one node listing every operand in order."""
        result = f"{'    ' * indents}{self._cls}("
        for operand in self.operands():
            result += "\n" + operand.display(indents + 1) + ","
        return result[:-1] + f"\n{'    ' * indents})"

    def __repr__(self):
        first, *rest = self.operands()
        return f"{self._cls}(" * len(rest) + repr(first) + "".join(f", {operand!r})" for operand in rest)


LITERALS = {lexical.StringLiteral: StringLiteral, lexical.NumberLiteral: NumberLiteral}
TERMS = {**LITERALS, lexical.Identifier: Identifier}
DEFAULTS = {"text": "", "num": 0}


def default_value(typ, token=None):
    """Returns the literal node holding typ's zero value."""
    if typ not in DEFAULTS:
        raise Fault("unsupported type '{}'", typ, reason=Fault.UNSUPPORTED_TYPE, token=token)
    value = DEFAULTS[typ]
    return StringLiteral(value, token) if isinstance(value, str) else NumberLiteral(value, token)


class Stmt(Expr):
    """Superclass for top-level statements. Subclasses double as grammar rules for the parser."""
    KEYWORD = None  # token class that starts this statement

    @classmethod
    def match(cls, parser):
        """Returns the parsed statement if the parser is positioned on this statement's keyword, else None."""
        if not isinstance(parser.peek(), cls.KEYWORD):
            return None
        return cls.parse(parser, parser.advance())

    @classmethod
    @abstractmethod
    def parse(cls, parser, keyword):
        """This method should consume the rest of the statement after keyword and return the statement node. It should
        raise a Fault if the statement is syntactically invalid.
        """


class StackDecl(Stmt):
    """Variable declaration: `stack <name> : <type>`, optionally followed by `<- <literal>`."""
    KEYWORD = lexical.Stack

    def __init__(self, name, typ, value, token=None):
        super().__init__(token)
        self.name = name
        self.typ = typ
        self.value = value

    @property
    def nodes(self):
        return [self.name, self.typ, self.value]

    @classmethod
    def parse(cls, parser, keyword):
        name = parser.expect(lexical.Identifier, "expected variable name after 'stack', got '{}'")
        parser.expect(lexical.Colon, "expected ':' after variable name, got '{}'")
        typ = parser.expect(lexical.Type, "expected type name ('text' or 'num') after ':', got '{}'")

        if isinstance(parser.peek(), lexical.IntoStream):
            parser.advance()
            token = parser.expect(tuple(LITERALS), "expected string or number literal after '<-', got '{}'")
            value = LITERALS[type(token)](token.value, token)
        else:
            value = default_value(typ.value, typ)

        return cls(name.value, typ.value, value, keyword)


class Output(Stmt):
    """Writes the value of an expression: `out <- <addition>`."""
    KEYWORD = lexical.Out

    def __init__(self, inner, token=None):
        super().__init__(token)
        self.inner = inner

    @property
    def nodes(self):
        return [self.inner]

    @classmethod
    def parse(cls, parser, keyword):
        parser.expect(lexical.IntoStream, "expected '<-' after 'out', got '{}'")

        expr = parser.term()
        while isinstance(parser.peek(), lexical.Add):
            plus = parser.advance()
            expr = Addition(expr, parser.term(), plus)

        return cls(expr, keyword)


class Input(Stmt):
    """Overwrites a variable with a line of input: `in -> <identifier>`."""
    KEYWORD = lexical.In

    def __init__(self, inner, token=None):
        super().__init__(token)
        self.inner = inner

    @property
    def nodes(self):
        return [self.inner]

    @classmethod
    def parse(cls, parser, keyword):
        parser.expect(lexical.FromStream, "expected '->' after 'in', got '{}'")
        name = parser.expect(lexical.Identifier, "input target must be a variable name, got '{}'")
        return cls(Identifier(name.value, name), keyword)


class Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.position = 0

    @property
    def exhausted(self):
        return self.position >= len(self.tokens)

    def peek(self):
        """Returns the current token without consuming it, or None at the end of the tokens."""
        return None if self.exhausted else self.tokens[self.position]

    def _truncated(self):
        last = self.tokens[-1] if self.tokens else None
        return Fault("unexpected end of input after '{}'", str(last) if last else "", reason=Fault.TRUNCATED,
                     token=last)

    def advance(self):
        """Consumes and returns the current token. Running past the end is a truncation fault."""
        if self.exhausted:
            raise self._truncated()
        token = self.tokens[self.position]
        self.position += 1
        return token

    def expect(self, kinds, msg):
        """Consumes the current token if it is one of kinds (a token class or tuple of them), else faults with msg."""
        token = self.advance()
        if not isinstance(token, kinds):
            raise Fault(msg, str(token), reason=Fault.UNEXPECTED_TOKEN, token=token)
        return token

    def term(self):
        """<term> ::= IDENT | STRING | NUMBER"""
        token = self.expect(tuple(TERMS), "expected variable name or literal, got '{}'")
        return TERMS[type(token)](token.value, token)

    def statement(self):
        for rule in Stmt.__subclasses__():
            stmt = rule.match(self)
            if stmt is not None:
                return stmt

        token = self.peek()
        raise Fault("unexpected token '{}': expected 'stack', 'out' or 'in'", str(token),
                    reason=Fault.UNEXPECTED_TOKEN, token=token)

    def parse(self):
        """Returns every statement in the token list, in order."""
        statements = []
        while not self.exhausted:
            statements.append(self.statement())
        return statements


def parse(tokens):
    """Shorthand for Parser(tokens).parse()."""
    return Parser(tokens).parse()
