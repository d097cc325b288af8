"""Lexical analysis for the XMini language: turns program text into a flat list of Tokens, terminated by END.

XMini is whitespace-insensitive and fully prefix, so tokens are mostly separated by whitespace. Lexing is done by
dispatching on the current character:

```
<number>     ::= [0-9]+
<string>     ::= '"' <char>* '"'               ; escapes: \b \f \t \r \n \' \" \\
               | <run>                         ; only directly after the "text" keyword
<operator>   ::= "+" | "-" | "*" | "%" | "~"   ; always a single character
               | <run>                         ; "/", "&&", "||", "==", "!", "!=", "<", "<=", ">", ">="
<word>       ::= <run>                         ; "output", "var", "set", "text" or [a-zA-Z_][a-zA-Z0-9_]*
<comment>    ::= "//" <char>*                  ; until end of line
```

A <run> is a maximal run of non-whitespace characters. Multi-character operators, words and comments are read as a
whole run first and only then classified. As a consequence, "//" touching other characters (as in `a//b`) is not a
comment, and `text` followed by anything (even an operator) reads that run as a string.
"""

import enum
import re
from dataclasses import dataclass, field
from typing import Optional

from xmini.lang.error import LexicalError


class TokenType(enum.Enum):
    """Kinds of token."""
    # keywords
    TEXT = "text"
    OUTPUT = "output"
    VAR = "var"
    SET = "set"

    # operators
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    BANG = "!"
    TILDE = "~"
    EQ = "=="
    NEQ = "!="
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    AND = "&&"
    OR = "||"

    # literals
    NUMBER = "<number>"
    STRING = "<string>"

    IDENTIFIER = "<identifier>"
    END = "<end>"


KEYWORDS = (TokenType.TEXT, TokenType.OUTPUT, TokenType.VAR, TokenType.SET)
UNARY = (TokenType.BANG, TokenType.TILDE)


@dataclass(frozen=True)
class Token:
    """Classified lexeme. text is the exact source lexeme, except for strings, where escapes are decoded. line and
    position locate the first character of the token and are ignored when comparing tokens.
    """
    kind: TokenType
    text: str
    line: Optional[int] = field(default=None, compare=False)
    position: Optional[int] = field(default=None, compare=False)

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r})"


class Lexer:
    """Single-pass tokenizer over a current-character cursor, tracking line and column for error messages."""
    ESCAPES = {"b": "\b", "f": "\f", "t": "\t", "r": "\r", "n": "\n", "'": "'", "\"": "\"", "\\": "\\"}
    SINGLE = {"+": TokenType.PLUS, "-": TokenType.MINUS, "*": TokenType.MUL, "%": TokenType.MOD, "~": TokenType.TILDE}
    OPERATORS = {
        "&": {"&&": TokenType.AND},
        "|": {"||": TokenType.OR},
        "=": {"==": TokenType.EQ},
        "!": {"!": TokenType.BANG, "!=": TokenType.NEQ},
        "<": {"<": TokenType.LT, "<=": TokenType.LTE},
        ">": {">": TokenType.GT, ">=": TokenType.GTE},
    }
    IDENTIFIER = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
    DIGITS = "0123456789"

    def __init__(self, source):
        self.source = source
        self.tokens = []

        self.pos = 0
        self.line = 1
        self.line_pos = 0

    @property
    def current(self):
        """Current character, or '' at end of input."""
        return self.source[self.pos] if self.pos < len(self.source) else ""

    def tokenize(self):
        """Returns list of Tokens ending with an END token. Raises a LexicalError on the first unclassifiable
        character or run.
        """
        while self.current:
            char = self.current
            line, position = self.line, self.line_pos

            if char.isspace():
                self.advance()

            elif char in Lexer.DIGITS:
                self.add(TokenType.NUMBER, self.read_number(), line, position)

            elif char == "\"":
                self.add(TokenType.STRING, self.read_quoted(), line, position)

            elif self.tokens and self.tokens[-1].kind is TokenType.TEXT:
                self.add(TokenType.STRING, self.read_run(), line, position)

            elif char in Lexer.SINGLE:
                self.add(Lexer.SINGLE[char], char, line, position)
                self.advance()

            elif char == "/":
                run = self.read_run()
                if run == "/":
                    self.add(TokenType.DIV, run, line, position)
                elif run.startswith("//"):
                    self.skip_comment()
                else:
                    self.error(f"Unexpected token: {run}", line, position, len(run))

            elif char in Lexer.OPERATORS:
                run = self.read_run()
                if run not in Lexer.OPERATORS[char]:
                    self.error(f"Unexpected token: {run}", line, position, len(run))
                self.add(Lexer.OPERATORS[char][run], run, line, position)

            elif char.isalpha():
                run = self.read_run()
                if run in ("output", "var", "set", "text"):
                    self.add(TokenType(run), run, line, position)
                elif Lexer.IDENTIFIER.fullmatch(run):
                    self.add(TokenType.IDENTIFIER, run, line, position)
                else:
                    self.error(f"Unexpected token: {run}", line, position, len(run))

            else:
                self.error(f"Unexpected token: {char}", line, position)

        self.add(TokenType.END, "", self.line, self.line_pos)
        return self.tokens

    def add(self, kind, text, line, position):
        self.tokens.append(Token(kind, text, line, position))

    def advance(self):
        """Moves the cursor one character forward, keeping track of line and column."""
        if self.current == "\n":
            self.line += 1
            self.line_pos = 0
        else:
            self.line_pos += 1
        self.pos += 1

    def read_number(self):
        start = self.pos
        while self.current and self.current in Lexer.DIGITS:
            self.advance()
        return self.source[start:self.pos]

    def read_quoted(self):
        """Reads a string surrounded by double quotes, decoding escapes. Cursor must be on the opening quote."""
        line, position = self.line, self.line_pos
        chars = []

        self.advance()
        while self.current and self.current != "\"":
            chars.append(self.read_char())

        if not self.current:
            self.error("Unexpected end of input", line, position)
        self.advance()

        return "".join(chars)

    def read_run(self):
        """Reads a maximal run of non-whitespace characters, decoding escapes. Used for unquoted strings, words,
        multi-character operators and comments alike.
        """
        chars = []
        while self.current and not self.current.isspace():
            chars.append(self.read_char())
        return "".join(chars)

    def read_char(self):
        """Reads one (possibly escaped) character."""
        char = self.current
        if char == "\\":
            self.advance()
            char = self.current
            if char not in Lexer.ESCAPES:
                self.error(f"Unexpected escape character: {char}", self.line, self.line_pos)
            char = Lexer.ESCAPES[char]

        self.advance()
        return char

    def skip_comment(self):
        """Discards the rest of the current line. The '//' run itself has already been read."""
        while self.current and self.current != "\n":
            self.advance()

    def error(self, msg, line, position, length=1):
        """Raises a LexicalError pointing at the given location."""
        raise LexicalError(msg, line, position, self.source.split("\n")[line - 1], length)


def tokenize(source):
    """Shorthand for Lexer(source).tokenize()."""
    return Lexer(source).tokenize()
