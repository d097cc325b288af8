"""Abstract syntax tree for the XMini language. The node set is closed:

```
<program>    ::= <statement>*
<statement>  ::= ("output" | "text") <expr>     ; Statement with no name
               | ("var" | "set") <ident> <expr> ; Statement with a name
<expr>       ::= <op> <expr> <expr>             ; Operation with two operands
               | <unary_op> <expr>              ; Operation with one operand
               | <number> | <string>            ; Literal
               | <ident>                        ; VariableRef

<op>         ::= "+" | "-" | "*" | "/" | "%" | "&&" | "||" | "==" | "!=" | "<" | "<=" | ">" | ">="
<unary_op>   ::= "~" | "!"
```

Nodes are immutable and are only ever built by the Parser, which guarantees that an Operation has as many operands as
its operator takes.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from xmini.lang.lexical import Token, TokenType


class Node:
    """Superclass of all syntax tree nodes."""

    @property
    def nodes(self):
        """Child nodes, in source order."""
        return ()

    def display(self, indents=0):
        """Recursively displays tree with readable format.

        Format:
        <Node>(expr='<expr>', nodes=[
            <Node>(expr='<expr>', nodes=[
                ...
                <Node>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


def _source(token):
    """Renders token back to source text. Strings are always quoted, so the result lexes to the same token."""
    if token.kind is TokenType.STRING:
        escaped = token.text.replace("\\", "\\\\").replace("\"", "\\\"")
        for char, escape in (("\b", "\\b"), ("\f", "\\f"), ("\t", "\\t"), ("\r", "\\r"), ("\n", "\\n")):
            escaped = escaped.replace(char, escape)
        return f"\"{escaped}\""
    return token.text


@dataclass(frozen=True)
class Literal(Node):
    """NUMBER or STRING literal."""
    token: Token

    def __str__(self):
        return _source(self.token)


@dataclass(frozen=True)
class VariableRef(Node):
    """Reference to a variable by name."""
    token: Token

    @property
    def name(self):
        return self.token.text

    def __str__(self):
        return self.token.text


@dataclass(frozen=True)
class Operation(Node):
    """Unary (one operand) or binary (two operands) operation."""
    operator: Token
    operands: Tuple[Node, ...]

    @property
    def nodes(self):
        return self.operands

    def __str__(self):
        return " ".join([self.operator.text] + [str(operand) for operand in self.operands])


@dataclass(frozen=True)
class Statement(Node):
    """Top-level statement. name is only set for var/set statements."""
    keyword: Token
    name: Optional[Token]
    expression: Node

    @property
    def nodes(self):
        return (self.expression,)

    def __str__(self):
        if self.name is None:
            return f"{self.keyword.text} {self.expression}"
        return f"{self.keyword.text} {self.name.text} {self.expression}"
