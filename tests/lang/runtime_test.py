import io
import unittest

from stacklang.lang.error import Fault
from stacklang.lang.lexical import tokenize
from stacklang.lang.runtime import Environment, Interpreter, resolve_escapes
from stacklang.lang.syntax import (Addition, Identifier, Input, NumberLiteral, Output, StackDecl, StringLiteral,
                                   parse)


def run(source, stdin=""):
    """Runs source and returns (stdout text, interpreter)."""
    stdout = io.StringIO()
    interpreter = Interpreter(stdin=io.StringIO(stdin), stdout=stdout)
    interpreter.run(parse(tokenize(source)))
    return stdout.getvalue(), interpreter


class EnvironmentTestCase(unittest.TestCase):

    def test_declare_and_lookup(self):
        env = Environment()
        env.declare("x", "1")
        env.declare("x", "2")  # last write wins
        self.assertEqual("2", env.lookup("x"))
        self.assertIn("x", env)
        self.assertEqual(1, len(env))
        self.assertEqual([("x", "2")], list(env))

    def test_undeclared(self):
        env = Environment()
        for action in (lambda: env.lookup("y"), lambda: env.assign("y", "v")):
            with self.assertRaises(Fault) as context:
                action()
            self.assertEqual(Fault.UNDECLARED, context.exception.reason)
        self.assertNotIn("y", env)

    def test_clear(self):
        env = Environment()
        env.declare("x", "")
        env.clear()
        self.assertEqual(0, len(env))


class DeclarationTestCase(unittest.TestCase):

    def test_round_trip(self):
        cases = {
            "plain": "plain",
            "": "",
            "two\\nlines": "two\nlines",
            "a\\n\\nb\\n": "a\n\nb\n",
            "tab\\tstays": "tab\\tstays",
        }
        for literal, expected in cases.items():
            output, interpreter = run(f'stack x : text <- "{literal}"\nout <- x')
            self.assertEqual(expected, output, literal)
            self.assertEqual(literal, interpreter.environment.lookup("x"), literal)  # stored verbatim

    def test_defaults(self):
        self.assertEqual("", run("stack x : text out <- x")[0])
        self.assertEqual("0", run("stack n : num out <- n")[0])

    def test_numbers_are_stored_as_text(self):
        __, interpreter = run("stack n : num <- 0042")
        self.assertEqual("42", interpreter.environment.lookup("n"))

    def test_redeclaration_overwrites(self):
        output, __ = run('stack x : text <- "a" stack x : num <- 1 out <- x')
        self.assertEqual("1", output)

    def test_type_mismatch(self):
        should_raise = ['stack n : num <- "5"', "stack s : text <- 5"]
        for case in should_raise:
            with self.assertRaises(Fault, msg=case) as context:
                run(case)
            self.assertEqual(Fault.TYPE_MISMATCH, context.exception.reason, case)

    def test_unsupported_type(self):
        with self.assertRaises(Fault) as context:
            Interpreter().execute(StackDecl("b", "bool", StringLiteral("")))
        self.assertEqual(Fault.UNSUPPORTED_TYPE, context.exception.reason)


class OutputTestCase(unittest.TestCase):

    def test_concatenation(self):
        cases = {
            "stack a:num<-1 stack b:num<-2 stack c:num<-3 out <- a + b + c": "123",
            "out <- 3 + 4": "34",
            'out <- "x = " + 10': "x = 10",
            'stack s : text <- "b" out <- "a" + s + "c"': "abc",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case)[0], case)

    def test_no_implicit_newline(self):
        self.assertEqual("ab", run('out <- "a" out <- "b"')[0])

    def test_undeclared(self):
        stdout = io.StringIO()
        interpreter = Interpreter(stdin=io.StringIO(), stdout=stdout)
        with self.assertRaises(Fault) as context:
            interpreter.run(parse(tokenize('out <- "before" out <- y out <- "after"')))

        self.assertEqual(Fault.UNDECLARED, context.exception.reason)
        self.assertEqual("before", stdout.getvalue())  # nothing runs past the fault

    def test_escape_resolution_timing(self):
        output, interpreter = run('stack s : text <- "\\n" out <- "[" + s + "]"')
        self.assertEqual("[\n]", output)
        self.assertEqual("\\n", interpreter.environment.lookup("s"))

    def test_long_concatenation_chain(self):
        terms = [str(index % 10) for index in range(6000)]
        output, __ = run("stack s : text <- \"!\" out <- " + " + ".join(terms) + " + s")
        self.assertEqual("".join(terms) + "!", output)

    def test_flushes_every_statement(self):
        class Recorder(io.StringIO):
            flushes = 0

            def flush(self):
                Recorder.flushes += 1
                super().flush()

        stdout = Recorder()
        Interpreter(stdout=stdout).run([Output(StringLiteral("a")), Output(NumberLiteral(1))])
        self.assertEqual(2, Recorder.flushes)
        self.assertEqual("a1", stdout.getvalue())


class InputTestCase(unittest.TestCase):

    def test_overwrite(self):
        output, interpreter = run('stack x : text <- "old" in -> x out <- x', stdin="new\n")
        self.assertEqual("new", output)
        self.assertEqual("new", interpreter.environment.lookup("x"))

    def test_reads_one_line_per_statement(self):
        output, __ = run("stack a : text stack b : text in -> a in -> b out <- b + a", stdin="1\n2\n3\n")
        self.assertEqual("21", output)

    def test_trailing_whitespace_trimmed(self):
        self.assertEqual("  padded", run("stack x : text in -> x out <- x", stdin="  padded \t\r\n")[0])

    def test_end_of_stream(self):
        self.assertEqual("", run('stack x : text <- "old" in -> x out <- x', stdin="")[0])

    def test_num_variable_takes_text(self):
        self.assertEqual("abc", run("stack n : num in -> n out <- n", stdin="abc\n")[0])

    def test_undeclared(self):
        stdin = io.StringIO("line\n")
        with self.assertRaises(Fault) as context:
            Interpreter(stdin=stdin, stdout=io.StringIO()).run(parse(tokenize("in -> x")))
        self.assertEqual(Fault.UNDECLARED, context.exception.reason)
        self.assertEqual("line\n", stdin.read())  # no input consumed

    def test_non_identifier_target(self):
        with self.assertRaises(Fault) as context:
            Interpreter(stdin=io.StringIO("x\n")).execute(Input(StringLiteral("x")))
        self.assertEqual(Fault.UNSUPPORTED_EXPR, context.exception.reason)


class EvaluateTestCase(unittest.TestCase):

    def test_evaluate(self):
        interpreter = Interpreter()
        interpreter.environment.declare("v", "val\\n")

        cases = [
            (Identifier("v"), "val\n"),
            (StringLiteral("s\\n"), "s\n"),
            (NumberLiteral(-3), "-3"),
            (Addition(Addition(NumberLiteral(1), NumberLiteral(2)), Identifier("v")), "12val\n"),
        ]
        for expr, expected in cases:
            self.assertEqual(expected, interpreter.evaluate(expr), expr)

    def test_unsupported(self):
        should_raise = [Output(StringLiteral("x")), StackDecl("x", "text", StringLiteral(""))]
        for expr in should_raise:
            with self.assertRaises(Fault, msg=repr(expr)) as context:
                Interpreter().evaluate(expr)
            self.assertEqual(Fault.UNSUPPORTED_EXPR, context.exception.reason)

    def test_resolve_escapes(self):
        self.assertEqual("a\nb", resolve_escapes("a\\nb"))
        self.assertEqual("\\", resolve_escapes("\\"))


if __name__ == '__main__':
    unittest.main()
