import io
import unittest
from unittest import mock

from xmini.lang.error import EvaluationError
from xmini.lang.evaluator import Evaluator, equals
from xmini.lang.lexical import Token, TokenType, tokenize
from xmini.lang.parser import parse


class EvaluatorTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.error_handler = mock.Mock()
        self.evaluator = Evaluator(out=self.out, error_handler=self.error_handler)

    def run_source(self, source):
        self.evaluator.run(parse(tokenize(source)))
        return self.out.getvalue()

    def output(self, source):
        """Runs source in a fresh Evaluator and returns what it printed."""
        out = io.StringIO()
        Evaluator(out=out, error_handler=mock.Mock()).run(parse(tokenize(source)))
        return out.getvalue()

    def test_text(self):
        cases = {
            "text hello": "hello\n",
            "text \"multi word\"": "multi word\n",
            "text \"a\\tb\"": "a\tb\n",
            "text 42": "42\n",
            "text hello text world": "hello\nworld\n",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.output(case), case)

    def test_arithmetic(self):
        cases = {
            "output + 1 2": "3",
            "output * + 1 2 3": "9",
            "output - 2 5": "-3",
            "output / 7 2": "3",
            "output / ~ 7 2": "-3",
            "output / 7 ~ 2": "-3",
            "output % 7 2": "1",
            "output % ~ 7 2": "-1",
            "output % 7 ~ 2": "1",
            "output ~ 5": "-5",
            "output ~ ~ 5": "5",
            "output * 99999999999 99999999999": "9999999999800000000001",
        }
        for case, expected in cases.items():
            self.assertEqual(expected + "\n", self.output(case), case)

    def test_logic(self):
        cases = {
            "output ! 0": "1",
            "output ! 3": "0",
            "output ! ~ 3": "0",
            "output && 1 2": "1",
            "output && 1 0": "0",
            "output || 0 0": "0",
            "output || 0 ~ 5": "1",
            "output < 1 2": "1",
            "output > 1 2": "0",
            "output <= 2 2": "1",
            "output >= 1 2": "0",
            "output == 1 1": "1",
            "output == 1 \"1\"": "0",
            "output != 1 \"1\"": "1",
            "output == \"a\" \"a\"": "1",
            "output != \"a\" \"b\"": "1",
        }
        for case, expected in cases.items():
            self.assertEqual(expected + "\n", self.output(case), case)

    def test_variables(self):
        self.assertEqual("5\n", self.run_source("var x 5 output x"))
        self.assertEqual({"x": 5}, self.evaluator.store)

        self.run_source("set x + x 1")
        self.assertEqual({"x": 6}, self.evaluator.store)

        self.run_source("var s \"str\"")
        self.assertEqual("str", self.evaluator.store["s"])
        self.error_handler.warn.assert_not_called()

    def test_redeclaration_warns(self):
        self.assertEqual("5\n10\n", self.run_source("var x 5 output x var x 10 output x"))
        self.error_handler.warn.assert_called_once_with("Variable x already defined")

    def test_errors(self):
        should_raise = {
            "set y 1": "Variable y not defined",
            "output y": "Undefined variable y",
            "output / 5 0": "Division by zero",
            "output % 5 0": "Modulo by zero",
            "output + \"a\" 1": "Operator '+' expects integer operands, got string",
            "output < 1 \"a\"": "Operator '<' expects integer operands, got string",
            "output ~ \"a\"": "Operator '~' expects integer operands, got string",
            "output ! \"\"": "Operator '!' expects integer operands, got string",
            "output && 1 \"a\"": "Operator '&&' expects integer operands, got string",
        }
        for case, msg in should_raise.items():
            with self.assertRaises(EvaluationError, msg=case) as context:
                self.output(case)
            self.assertEqual(msg, context.exception.msg, case)
            self.assertFalse(context.exception.internal, case)

    def test_failing_statement_has_no_output(self):
        with self.assertRaises(EvaluationError):
            self.run_source("output 1 set y 1 output 2")
        self.assertEqual("1\n", self.out.getvalue())
        self.assertNotIn("y", self.evaluator.store)

    def test_set_checks_name_before_evaluating(self):
        with self.assertRaises(EvaluationError) as context:
            self.run_source("set y / 1 0")
        self.assertEqual("Variable y not defined", context.exception.msg)

    def test_unknown_operator(self):
        with self.assertRaises(EvaluationError) as context:
            self.evaluator.apply(Token(TokenType.NUMBER, "1"), 1, 2)
        self.assertTrue(context.exception.internal)

    def test_stores_are_independent(self):
        other = Evaluator(out=io.StringIO(), error_handler=mock.Mock())
        self.run_source("var x 1")
        self.assertNotIn("x", other.store)

    def test_deterministic(self):
        source = "var a 3 var b 4 output + * a a * b b text done output == a b"
        self.assertEqual(self.output(source), self.output(source))
        self.assertEqual("25\ndone\n0\n", self.output(source))

    def test_equals(self):
        self.assertTrue(equals(1, 1))
        self.assertTrue(equals("1", "1"))
        self.assertFalse(equals(1, "1"))
        self.assertFalse(equals(0, ""))


if __name__ == '__main__':
    unittest.main()
