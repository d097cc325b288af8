"""Recursive descent parser for the XMini language. Turns the Lexer's tokens into a list of Statements (see
syntax.py for the grammar). One token of lookahead, no backtracking.

Because every operator is prefix and takes a fixed number of operands, no precedence or associativity rules are
needed: an operator token simply consumes the next one or two expressions.
"""

from xmini.lang.error import ParseError
from xmini.lang.lexical import KEYWORDS, UNARY, TokenType
from xmini.lang.syntax import Literal, Operation, Statement, VariableRef


class Parser:
    """Parses a list of Tokens ending with END. source is only used to show the offending line in errors."""

    def __init__(self, tokens, source=None):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos]

    def advance(self):
        """Consumes and returns the current token. END is never consumed."""
        token = self.peek()
        if token.kind is not TokenType.END:
            self.pos += 1
        return token

    def match(self, *kinds):
        """Whether or not the current token is of one of kinds. Does not consume it."""
        return self.peek().kind in kinds

    def parse(self):
        """Returns list of top-level Statements, in evaluation order."""
        statements = []
        while not self.match(TokenType.END):
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self):
        if self.match(TokenType.TEXT, TokenType.OUTPUT):
            keyword = self.advance()
            return Statement(keyword, None, self.parse_expression())

        elif self.match(TokenType.VAR, TokenType.SET):
            keyword = self.advance()
            if not self.match(TokenType.IDENTIFIER):
                self.error(f"'{keyword.text}' expects a variable name")
            name = self.advance()
            return Statement(keyword, name, self.parse_expression())

        self.error()

    def parse_expression(self):
        """Parses one prefix expression."""
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self.advance())

        elif self.match(TokenType.IDENTIFIER):
            return VariableRef(self.advance())

        elif self.match(*UNARY):
            operator = self.advance()
            return Operation(operator, (self.parse_expression(),))

        elif not self.match(*KEYWORDS, TokenType.END):
            operator = self.advance()
            left = self.parse_expression()
            right = self.parse_expression()
            return Operation(operator, (left, right))

        self.error()

    def error(self, msg=None):
        """Raises a ParseError for the current token."""
        token = self.peek()
        if msg is None:
            if token.kind is TokenType.END:
                msg = "Unexpected end of input"
            else:
                msg = f"Unexpected token {token.kind.name} '{token.text}'"
        else:
            msg += f", got {token.kind.name} '{token.text}'" if token.kind is not TokenType.END else ", got end of input"

        expr = None
        if self.source is not None and token.line is not None:
            lines = self.source.split("\n")
            if token.line <= len(lines):
                expr = lines[token.line - 1]
        raise ParseError(msg, token, expr)


def parse(tokens, source=None):
    """Shorthand for Parser(tokens, source).parse()."""
    return Parser(tokens, source).parse()
