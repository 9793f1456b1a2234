"""Expression tree representation for digit puzzles."""

from sum100.expression.types import (
    BINARY_OPERATORS,
    UNARY_OPERATORS,
    BinaryOperator,
    NodeType,
    UnaryOperator,
)
from sum100.expression.nodes import (
    BinaryOpNode,
    ConcatNode,
    EquationNode,
    Node,
    NumberNode,
    UnaryOpNode,
    evaluate,
)
from sum100.expression.parser import (
    ParsedInput,
    Parser,
    parse_input,
    parse_number_sequence,
)
from sum100.expression.render import (
    Renderer,
    render,
    render_to_latex,
    render_to_mathematica,
    render_to_text,
)

__all__ = [
    "BINARY_OPERATORS",
    "UNARY_OPERATORS",
    "BinaryOperator",
    "NodeType",
    "UnaryOperator",
    "Node",
    "NumberNode",
    "ConcatNode",
    "UnaryOpNode",
    "BinaryOpNode",
    "EquationNode",
    "evaluate",
    "ParsedInput",
    "Parser",
    "parse_input",
    "parse_number_sequence",
    "Renderer",
    "render",
    "render_to_text",
    "render_to_latex",
    "render_to_mathematica",
]
