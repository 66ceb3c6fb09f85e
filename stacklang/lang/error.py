"""Error handling for the stack language. Only Faults should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class Fault(Exception):
    """Templates an error/warning message so that it can be used to throw a stack language error/warning. Every fault
    belongs to exactly one of the reasons below, so that callers can tell them apart without parsing messages.
    """
    TRUNCATED = "truncated"
    UNSUPPORTED_TYPE = "unsupported type"
    TYPE_MISMATCH = "type mismatch"
    UNDECLARED = "undeclared"
    UNEXPECTED_TOKEN = "unexpected token"
    MALFORMED_NUMBER = "malformed number"
    UNSUPPORTED_EXPR = "unsupported expression"
    IO = "io"

    def __init__(self, msg, exprs=None, reason=None, token=None, diagnosis=True, internal=False):
        """msg is a str.format template; each expr in exprs fills one '{}' and is bolded in the colored message."""
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets

        self.reason = reason
        self.token = token  # offending token, if any (gives line/col)
        self.diagnosis = diagnosis
        self.internal = internal

    @property
    def line(self):
        return self.token.line if self.token is not None else None

    @property
    def col(self):
        return self.token.col if self.token is not None else None

    @property
    def width(self):
        """Number of source characters to highlight."""
        return max(len(self.token.text), 1) if self.token is not None else 1


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report stack language errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.sources = {}  # path: source lines, insertion-ordered

    def register_file(self, path, source=""):
        """Registers path (and its source text, used for diagnosis) in the handler."""
        self.sources[path] = source.splitlines()

    def remove_file(self, path):
        self.sources.pop(path, None)

    @property
    def out(self):
        return self.stream if self.stream is not None else sys.stderr

    def _locate(self, error):
        """Returns (path, source line) for error, using the most recently registered file."""
        if not self.sources:
            return "<unknown>", None

        path, lines = list(self.sources.items())[-1]
        if error.line is not None and 0 < error.line <= len(lines):
            return path, lines[error.line - 1]
        return path, None

    @staticmethod
    def diagnose(error, line, warning=False):
        """Returns the offending part of line highlighted and bolded, with a caret underneath."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start = error.col - 1
        end = min(start + error.width, max(len(line), start + 1))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _header(self, path, error):
        if error.line is None:
            return colored(f"{path}: ", attrs=["bold"])
        return colored(f"{path}:{error.line}:{error.col}: ", attrs=["bold"])

    def _report(self, error, label, color):
        path, line = self._locate(error)

        msg = self._header(path, error)
        if error.internal:
            msg += colored("[internal] ", color, attrs=["bold"])
        msg += colored(f"{label}: ", color, attrs=["bold"]) + error.msg
        print(msg, file=self.out)

        if not error.internal and error.diagnosis and line is not None:
            print(ErrorHandler.diagnose(error, line, warning=color == ErrorHandler.WARNING), file=self.out)

    def warn(self, error):
        """Prints a non-fatal warning. error must be a Fault."""
        self._report(error, "warning", ErrorHandler.WARNING)

    def throw(self, error):
        """Reports error, which must be a Fault, and exits if this handler is fatal."""
        self._report(error, "error", ErrorHandler.ERROR)
        self.out.flush()

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(Fault("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(Fault("expression nested too deeply", reason=Fault.UNSUPPORTED_EXPR, diagnosis=False))
        elif exc_type is Fault:
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(Fault("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True))
            do_exit = True

        return not do_exit
