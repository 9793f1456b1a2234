"""Node tags and operator enums for the expression model.

The node set is closed: every variant is listed in NodeType and every
operator a node may carry is listed in UnaryOperator or BinaryOperator.
"""

from enum import Enum, auto


class NodeType(Enum):
    """Tags of the expression node variants."""

    NUMBER = auto()      # Single literal value
    CONCAT = auto()      # Run of digits read as one literal
    UNARY_OP = auto()    # Operator with one child
    BINARY_OP = auto()   # Operator with two children
    EQUATION = auto()    # Root expression paired with a target


class UnaryOperator(Enum):
    """Unary operators, valued by their canonical symbol."""

    NEGATE = "-"
    FACTORIAL = "!"
    SQRT = "√"

    @property
    def is_prefix(self) -> bool:
        """Check if the operator is written before its operand."""
        return self is not UnaryOperator.FACTORIAL

    @classmethod
    def from_symbol(cls, symbol: str) -> "UnaryOperator":
        for op in cls:
            if op.value == symbol:
                return op
        raise ValueError(f"Unknown unary operator: {symbol}")


class BinaryOperator(Enum):
    """Binary operators, valued by their canonical symbol."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    POWER = "^"

    @property
    def precedence(self) -> int:
        """Binding strength used by the parser and the LaTeX renderer."""
        if self in (BinaryOperator.ADD, BinaryOperator.SUBTRACT):
            return 1
        if self is BinaryOperator.POWER:
            return 3
        return 2

    @classmethod
    def from_symbol(cls, symbol: str) -> "BinaryOperator":
        for op in cls:
            if op.value == symbol:
                return op
        raise ValueError(f"Unknown binary operator: {symbol}")


# Order in which the search tries operators
UNARY_OPERATORS: tuple[UnaryOperator, ...] = (
    UnaryOperator.FACTORIAL,
    UnaryOperator.SQRT,
    UnaryOperator.NEGATE,
)

BINARY_OPERATORS: tuple[BinaryOperator, ...] = (
    BinaryOperator.ADD,
    BinaryOperator.SUBTRACT,
    BinaryOperator.MULTIPLY,
    BinaryOperator.DIVIDE,
    BinaryOperator.MODULO,
    BinaryOperator.POWER,
)
