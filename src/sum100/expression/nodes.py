"""Expression tree nodes for digit puzzles.

Implements the closed set of AST nodes:
- NumberNode: A literal value (e.g., 7)
- ConcatNode: Consecutive digits read as one literal (e.g., 1,2,3 -> 123)
- UnaryOpNode: Negation, factorial or square root of a child
- BinaryOpNode: Arithmetic on two children (e.g., (1 + 2))
- EquationNode: Root expression paired with a target integer

Nodes are frozen dataclasses; trees are immutable after construction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math

from sum100.errors import (
    DivisionByZeroError,
    FactorialDomainError,
    FactorialOverflowError,
    ModuloByZeroError,
    NonFiniteResultError,
    SqrtDomainError,
)
from sum100.expression.types import BinaryOperator, NodeType, UnaryOperator


EPSILON = 1e-12              # Divisors closer to zero than this are zero
EQUALITY_TOLERANCE = 1e-9    # |value - target| below this is a match
FACTORIAL_OVERFLOW = 170     # 171! does not fit in a float


@dataclass(frozen=True)
class Node(ABC):
    """Abstract base class for expression tree nodes."""

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        """Get the variant tag of this node."""

    @property
    def children(self) -> tuple["Node", ...]:
        """Get the direct children of this node."""
        return ()

    @abstractmethod
    def to_string(self) -> str:
        """Canonical text rendering, unique per tree shape."""

    def evaluate(self) -> float:
        """Evaluate this node, raising EvalError on domain failures."""
        return evaluate(self)

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class NumberNode(Node):
    """Literal non-negative integer."""

    value: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Number value must be an integer, got {self.value!r}")
        if self.value < 0:
            raise ValueError(f"Number value must be non-negative, got {self.value}")

    @property
    def node_type(self) -> NodeType:
        return NodeType.NUMBER

    def to_string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ConcatNode(Node):
    """Run of consecutive input digits read as one decimal literal."""

    digits: tuple[int, ...] = ()

    MIN_LENGTH = 2
    MAX_LENGTH = 4

    def __post_init__(self) -> None:
        object.__setattr__(self, "digits", tuple(self.digits))
        if not self.MIN_LENGTH <= len(self.digits) <= self.MAX_LENGTH:
            raise ValueError(
                f"Concatenation needs {self.MIN_LENGTH}-{self.MAX_LENGTH} digits, "
                f"got {len(self.digits)}"
            )
        if any(not isinstance(d, int) or d < 0 for d in self.digits):
            raise ValueError(f"Concatenation digits must be non-negative integers: {self.digits}")

    @property
    def node_type(self) -> NodeType:
        return NodeType.CONCAT

    @property
    def literal(self) -> int:
        """The integer formed by joining the digits."""
        return int(self.to_string())

    def to_string(self) -> str:
        return "".join(str(d) for d in self.digits)


@dataclass(frozen=True)
class UnaryOpNode(Node):
    """Unary operator applied to one child.

    Accepts the operator as a UnaryOperator or as its symbol ("-", "!", "√").
    """

    operator: UnaryOperator = UnaryOperator.NEGATE
    operand: Node = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if isinstance(self.operator, str):
            object.__setattr__(self, "operator", UnaryOperator.from_symbol(self.operator))
        if not isinstance(self.operand, Node):
            raise ValueError("Unary operator needs an operand node")

    @property
    def node_type(self) -> NodeType:
        return NodeType.UNARY_OP

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.operand,)

    def to_string(self) -> str:
        inner = self.operand.to_string()
        if self.operator.is_prefix:
            return f"{self.operator.value}{inner}"
        # (-3)! and -3! are different trees
        if isinstance(self.operand, UnaryOpNode) and self.operand.operator.is_prefix:
            return f"({inner})!"
        return f"{inner}!"


@dataclass(frozen=True)
class BinaryOpNode(Node):
    """Binary operator applied to a left and a right child.

    Accepts the operator as a BinaryOperator or as its symbol.
    """

    left: Node = None  # type: ignore[assignment]
    operator: BinaryOperator = BinaryOperator.ADD
    right: Node = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if isinstance(self.operator, str):
            object.__setattr__(self, "operator", BinaryOperator.from_symbol(self.operator))
        if not isinstance(self.left, Node) or not isinstance(self.right, Node):
            raise ValueError("Binary operator needs left and right nodes")

    @property
    def node_type(self) -> NodeType:
        return NodeType.BINARY_OP

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)

    def to_string(self) -> str:
        return f"({self.left.to_string()} {self.operator.value} {self.right.to_string()})"


@dataclass(frozen=True)
class EquationNode(Node):
    """A complete equation: expression = target."""

    expression: Node = None  # type: ignore[assignment]
    target: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.expression, Node):
            raise ValueError("Equation needs an expression node")

    @property
    def node_type(self) -> NodeType:
        return NodeType.EQUATION

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.expression,)

    def to_string(self) -> str:
        return f"{self.expression.to_string()} = {self.target}"

    def is_valid(self, tolerance: float = EQUALITY_TOLERANCE) -> bool:
        """Check if the expression evaluates to the target. Never raises."""
        try:
            value = evaluate(self.expression)
        except ArithmeticError:
            return False
        return abs(value - self.target) < tolerance


# =============================================================================
# Evaluation
# =============================================================================

def _finite(value: float) -> float:
    if isinstance(value, complex) or not math.isfinite(value):
        raise NonFiniteResultError(f"Non-finite result: {value}")
    return value


def apply_unary(operator: UnaryOperator, value: float) -> float:
    """Apply a unary operator to an already evaluated operand."""
    if operator is UnaryOperator.NEGATE:
        return -value
    if operator is UnaryOperator.FACTORIAL:
        if value < 0 or not float(value).is_integer():
            raise FactorialDomainError(f"Factorial of {value} is undefined")
        if value > FACTORIAL_OVERFLOW:
            raise FactorialOverflowError(f"Factorial of {value} overflows")
        return float(math.factorial(int(value)))
    if operator is UnaryOperator.SQRT:
        if value < 0:
            raise SqrtDomainError(f"Square root of negative number {value}")
        return math.sqrt(value)
    raise ValueError(f"Unknown unary operator: {operator}")


def apply_binary(operator: BinaryOperator, left: float, right: float) -> float:
    """Apply a binary operator to already evaluated operands."""
    if operator is BinaryOperator.ADD:
        result = left + right
    elif operator is BinaryOperator.SUBTRACT:
        result = left - right
    elif operator is BinaryOperator.MULTIPLY:
        result = left * right
    elif operator is BinaryOperator.DIVIDE:
        if abs(right) < EPSILON:
            raise DivisionByZeroError("Division by zero")
        result = left / right
    elif operator is BinaryOperator.MODULO:
        if abs(right) < EPSILON:
            raise ModuloByZeroError("Modulo by zero")
        # Remainder takes the sign of the dividend
        result = math.fmod(left, right)
    elif operator is BinaryOperator.POWER:
        try:
            result = float(left) ** float(right)
        except (OverflowError, ZeroDivisionError) as e:
            raise NonFiniteResultError(f"{left} ^ {right}: {e}") from e
    else:
        raise ValueError(f"Unknown binary operator: {operator}")
    return _finite(result)


def evaluate(node: Node) -> float:
    """Recursively evaluate a node to a finite float.

    Raises:
        EvalError: On any domain failure (division by zero, bad factorial, ...)
        TypeError: If the node is not one of the known variants
    """
    if isinstance(node, NumberNode):
        return float(node.value)

    elif isinstance(node, ConcatNode):
        return float(node.literal)

    elif isinstance(node, UnaryOpNode):
        return _finite(apply_unary(node.operator, evaluate(node.operand)))

    elif isinstance(node, BinaryOpNode):
        return apply_binary(node.operator, evaluate(node.left), evaluate(node.right))

    elif isinstance(node, EquationNode):
        return evaluate(node.expression)

    else:
        raise TypeError(f"Unknown node type: {type(node)}")


# =============================================================================
# Tree helpers
# =============================================================================

def count_nodes(node: Node) -> int:
    """Count total nodes in a subtree."""
    return 1 + sum(count_nodes(c) for c in node.children)


def get_depth(node: Node) -> int:
    """Get the depth of a subtree."""
    if node.children:
        return 1 + max(get_depth(c) for c in node.children)
    return 1


def factorial_depth(node: Node) -> int:
    """Count the factorials stacked directly at the top of a subtree."""
    depth = 0
    while isinstance(node, UnaryOpNode) and node.operator is UnaryOperator.FACTORIAL:
        depth += 1
        node = node.operand
    return depth
