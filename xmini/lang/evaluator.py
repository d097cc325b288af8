"""Tree-walking evaluator for the XMini language.

Runtime values are either ints or strs, nothing else. Truthiness is encoded with ints: 0 is false, anything else is
true, and boolean/comparison operators always produce 1 or 0. Only == and != accept strings; an int is never equal to
a str.
"""

import operator
import sys

from xmini.lang.error import EvaluationError, ErrorHandler
from xmini.lang.lexical import TokenType
from xmini.lang.syntax import Literal, Operation, Statement, VariableRef


def _divide(left, right):
    """Integer division truncating toward zero."""
    if right == 0:
        raise EvaluationError("Division by zero")
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _modulo(left, right):
    """Remainder of truncating division: takes the sign of left."""
    if right == 0:
        raise EvaluationError("Modulo by zero")
    return left - right * _divide(left, right)


def _truth(value):
    return 1 if value else 0


ARITHMETIC = {
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
    TokenType.MUL: operator.mul,
    TokenType.DIV: _divide,
    TokenType.MOD: _modulo,
    TokenType.AND: lambda left, right: _truth(left != 0 and right != 0),
    TokenType.OR: lambda left, right: _truth(left != 0 or right != 0),
    TokenType.LT: lambda left, right: _truth(left < right),
    TokenType.GT: lambda left, right: _truth(left > right),
    TokenType.LTE: lambda left, right: _truth(left <= right),
    TokenType.GTE: lambda left, right: _truth(left >= right),
}


def equals(left, right):
    """Structural equality across both value types: values of different types are never equal."""
    return type(left) is type(right) and left == right


def type_name(value):
    return "integer" if isinstance(value, int) else "string"


def render(value):
    """Renders value the way text/output statements print it."""
    return str(value)


class Evaluator:
    """Executes Statements against a variable store. The store is owned by this Evaluator and persists between calls
    to run, so one Evaluator can serve a whole interactive session.
    """

    def __init__(self, store=None, out=None, error_handler=None):
        self.store = store if store is not None else {}
        self.out = out  # defaults to sys.stdout at write time, so that redirection is honored
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)

    def run(self, statements):
        """Executes statements in order."""
        for statement in statements:
            self.execute(statement)

    def execute(self, statement):
        kind = statement.keyword.kind

        if kind in (TokenType.TEXT, TokenType.OUTPUT):
            print(render(self.evaluate(statement.expression)), file=self.out if self.out is not None else sys.stdout)

        elif kind is TokenType.VAR:
            name = statement.name.text
            if name in self.store:
                self.error_handler.warn(f"Variable {name} already defined")
            self.store[name] = self.evaluate(statement.expression)

        elif kind is TokenType.SET:
            name = statement.name.text
            if name not in self.store:
                raise EvaluationError(f"Variable {name} not defined")
            self.store[name] = self.evaluate(statement.expression)

        else:
            raise EvaluationError(f"Unexpected statement {statement.keyword!r}", internal=True)

    def evaluate(self, node):
        """Returns the value (int or str) of an expression node."""
        if isinstance(node, Literal):
            if node.token.kind is TokenType.NUMBER:
                return int(node.token.text)
            return node.token.text

        elif isinstance(node, VariableRef):
            if node.name not in self.store:
                raise EvaluationError(f"Undefined variable {node.name}")
            return self.store[node.name]

        elif isinstance(node, Operation):
            values = [self.evaluate(operand) for operand in node.operands]
            return self.apply(node.operator, *values)

        elif isinstance(node, Statement):
            raise EvaluationError(f"'{node}' is a statement, not an expression", internal=True)

        raise EvaluationError(f"Unknown node {node!r}", internal=True)

    def apply(self, op, *values):
        """Applies operator token op to already evaluated operand values."""
        kind = op.kind

        if kind in (TokenType.EQ, TokenType.NEQ):
            left, right = values
            return _truth(equals(left, right) == (kind is TokenType.EQ))

        for value in values:
            if not isinstance(value, int):
                raise EvaluationError(f"Operator '{op.text}' expects integer operands, got {type_name(value)}")

        if kind is TokenType.TILDE:
            return -values[0]
        elif kind is TokenType.BANG:
            return _truth(values[0] == 0)
        elif kind in ARITHMETIC:
            return ARITHMETIC[kind](*values)

        raise EvaluationError(f"Unknown operator: {kind.name}", internal=True)
