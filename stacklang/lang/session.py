"""Session control for the stack language. Runs the lex -> parse -> interpret pipeline, either over a whole file or
over source added piece by piece in command-line mode.
"""

from stacklang.lang.error import Fault
from stacklang.lang.lexical import Lexer
from stacklang.lang.runtime import Environment, Interpreter
from stacklang.lang.syntax import Parser


class Session:
    """Governs a stack language session: one Environment shared by everything that runs in it."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, stdin=None, stdout=None):
        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.environment = Environment()
        self.interpreter = Interpreter(self.environment, stdin, stdout)
        self.to_exec = []  # parsed statements waiting to be run

        self.error_handler.register_file(path)
        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.add(Session.read(path))

        elif not cmd_line:
            raise Fault("'<in>' is a reserved filename", reason=Fault.IO, diagnosis=False)

    @staticmethod
    def read(path):
        """Returns the text of the source file at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except OSError:
            raise Fault("'{}' could not be opened", path, reason=Fault.IO, diagnosis=False)

    @staticmethod
    def tokenize(source):
        """Returns (tokens, warnings) for source."""
        lexer = Lexer(source)
        return lexer.tokenize(), lexer.warnings

    def add(self, source):
        """Lexes and parses source, queueing its statements. Nothing is executed until run is called. Returns the
        parsed statements.
        """
        self.error_handler.register_file(self.path, source)  # in case error is raised

        tokens, warnings = Session.tokenize(source)
        for warning in warnings:
            self.error_handler.warn(warning)

        statements = Parser(tokens).parse()
        self.to_exec.extend(statements)
        return statements

    def run(self):
        """Executes queued statements in order. Will raise any faults that are encountered; in command-line mode, the
        queue is emptied even if a statement faults.
        """
        done = 0
        try:
            for statement in self.to_exec:
                self.interpreter.execute(statement)
                done += 1
        finally:
            del self.to_exec[:done]
            if self.cmd_line:
                self.to_exec = []

    def reset(self):
        """Forgets every variable and every queued statement."""
        self.environment.clear()
        self.to_exec = []
