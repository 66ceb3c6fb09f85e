"""Tree-walking interpreter for the stack language.

Every value is stored as text, whatever its declared type: numbers are turned into their decimal form as soon as they
are declared or evaluated. As a consequence '+' only ever concatenates, so `out <- 3 + 4` writes "34".
"""

import sys

from stacklang.lang.error import Fault
from stacklang.lang.syntax import Addition, Identifier, Input, NumberLiteral, Output, StackDecl, StringLiteral


ESCAPES = {"\\n": "\n"}


def resolve_escapes(text):
    """Replaces every escape sequence in text with the character it stands for."""
    for escape, char in ESCAPES.items():
        text = text.replace(escape, char)
    return text


class Environment:
    """Mapping of variable name to its current (text) value. There is one flat scope: the last write wins."""

    def __init__(self):
        self.variables = {}

    def declare(self, name, value):
        """Binds name to value, creating or overwriting it."""
        self.variables[name] = value

    def assign(self, name, value, token=None):
        """Overwrites an existing variable. Assigning to an undeclared name is a fault."""
        self.lookup(name, token)
        self.variables[name] = value

    def lookup(self, name, token=None):
        try:
            return self.variables[name]
        except KeyError:
            raise Fault("variable '{}' is not declared", name, reason=Fault.UNDECLARED, token=token)

    def clear(self):
        self.variables.clear()

    def __contains__(self, name):
        return name in self.variables

    def __iter__(self):
        return iter(self.variables.items())

    def __len__(self):
        return len(self.variables)

    def __repr__(self):
        return f"Environment({self.variables!r})"


class Interpreter:
    """Executes statements in order against an Environment. stdin and stdout default to the process streams at the
    time they are used.
    """

    def __init__(self, environment=None, stdin=None, stdout=None):
        self.environment = environment if environment is not None else Environment()
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    def run(self, statements):
        for statement in statements:
            self.execute(statement)

    def execute(self, statement):
        """Runs a single statement, committing all of its side effects before returning."""
        if isinstance(statement, StackDecl):
            self.declare(statement)

        elif isinstance(statement, Output):
            self.stdout.write(self.evaluate(statement.inner))
            self.stdout.flush()

        elif isinstance(statement, Input):
            if not isinstance(statement.inner, Identifier):
                raise Fault("input target must be a variable name, got '{}'", repr(statement.inner),
                            reason=Fault.UNSUPPORTED_EXPR, token=statement.token)
            self.environment.lookup(statement.inner.name, statement.inner.token)

            line = self.stdin.readline()  # "" at end of stream
            self.environment.assign(statement.inner.name, line.rstrip(), statement.inner.token)

        else:
            raise Fault("unsupported statement '{}'", repr(statement), reason=Fault.UNSUPPORTED_EXPR,
                        token=getattr(statement, "token", None))

    def declare(self, decl):
        """Binds decl.name to its initial value. Initializers must match the declared type."""
        if decl.typ == "text":
            if not isinstance(decl.value, StringLiteral):
                raise Fault("'text' variable '{}' must be initialized with a string literal", decl.name,
                            reason=Fault.TYPE_MISMATCH, token=decl.value.token)
            self.environment.declare(decl.name, decl.value.value)

        elif decl.typ == "num":
            if not isinstance(decl.value, NumberLiteral):
                raise Fault("'num' variable '{}' must be initialized with a number literal", decl.name,
                            reason=Fault.TYPE_MISMATCH, token=decl.value.token)
            self.environment.declare(decl.name, str(decl.value.value))

        else:
            raise Fault("unsupported type '{}'", decl.typ, reason=Fault.UNSUPPORTED_TYPE, token=decl.token)

    def evaluate(self, expr):
        """Evaluates expr to text. Escape sequences are resolved here and nowhere else."""
        if isinstance(expr, Identifier):
            return resolve_escapes(self.environment.lookup(expr.name, expr.token))

        elif isinstance(expr, StringLiteral):
            return resolve_escapes(expr.value)

        elif isinstance(expr, NumberLiteral):
            return str(expr.value)

        elif isinstance(expr, Addition):
            return "".join(self.evaluate(operand) for operand in expr.operands())

        raise Fault("unsupported expression in evaluation: '{}'", repr(expr), reason=Fault.UNSUPPORTED_EXPR,
                    token=getattr(expr, "token", None))
