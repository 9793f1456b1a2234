"""Renderers from expression trees to text, LaTeX and Mathematica.

All renderers are pure structural walks of the node variants; they share no
state with the solver.
"""

from __future__ import annotations

from typing import Callable

from sum100.expression.nodes import (
    BinaryOpNode,
    ConcatNode,
    EquationNode,
    Node,
    NumberNode,
    UnaryOpNode,
)
from sum100.expression.types import BinaryOperator, UnaryOperator


RENDER_FORMATS = ("text", "latex", "mathematica")


class Renderer:
    """Renders expression trees in one output format.

    Formats:
    - text: the canonical form, e.g. "((1 + 2) * 3) = 9"
    - latex: e.g. "\\left(1 + 2\\right) \\cdot 3 = 9"
    - mathematica: e.g. "((1 + 2) * 3) == 9"
    """

    def __init__(self, format: str = "text") -> None:
        if format not in RENDER_FORMATS:
            raise ValueError(f"Unknown render format: {format}. Valid: {RENDER_FORMATS}")
        self.format = format
        self._render_node: Callable[[Node], str] = {
            "text": self._render_text,
            "latex": self._render_latex,
            "mathematica": self._render_mathematica,
        }[format]

    def render(self, node: Node) -> str:
        """Render a node (usually an EquationNode)."""
        return self._render_node(node)

    def render_many(self, nodes: list[Node]) -> list[str]:
        return [self.render(n) for n in nodes]

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    @staticmethod
    def _render_text(node: Node) -> str:
        return node.to_string()

    # -------------------------------------------------------------------------
    # LaTeX
    # -------------------------------------------------------------------------

    def _render_latex(self, node: Node) -> str:
        if isinstance(node, (NumberNode, ConcatNode)):
            return node.to_string()

        elif isinstance(node, UnaryOpNode):
            operand = self._render_latex(node.operand)
            if node.operator is UnaryOperator.SQRT:
                return f"\\sqrt{{{operand}}}"
            if node.operator is UnaryOperator.FACTORIAL:
                if _is_compound(node.operand):
                    operand = _latex_group(operand)
                return f"{operand}!"
            if _is_additive(node.operand):
                operand = _latex_group(operand)
            return f"-{operand}"

        elif isinstance(node, BinaryOpNode):
            left = self._render_latex(node.left)
            right = self._render_latex(node.right)
            op = node.operator

            if op is BinaryOperator.DIVIDE:
                return f"\\frac{{{left}}}{{{right}}}"
            if op is BinaryOperator.POWER:
                if _is_compound(node.left):
                    left = _latex_group(left)
                return f"{left}^{{{right}}}"
            if op is BinaryOperator.ADD:
                return f"{left} + {right}"
            if op is BinaryOperator.SUBTRACT:
                if _is_additive(node.right):
                    right = _latex_group(right)
                return f"{left} - {right}"

            # Multiplicative operators bind tighter than + and -
            if _is_additive(node.left):
                left = _latex_group(left)
            if _is_additive(node.right) or _is_inline_multiplicative(node.right):
                right = _latex_group(right)
            if op is BinaryOperator.MULTIPLY:
                return f"{left} \\cdot {right}"
            return f"{left} \\bmod {right}"

        elif isinstance(node, EquationNode):
            return f"{self._render_latex(node.expression)} = {node.target}"

        else:
            raise TypeError(f"Unknown node type: {type(node)}")

    # -------------------------------------------------------------------------
    # Mathematica
    # -------------------------------------------------------------------------

    def _render_mathematica(self, node: Node) -> str:
        if isinstance(node, (NumberNode, ConcatNode)):
            return node.to_string()

        elif isinstance(node, UnaryOpNode):
            operand = self._render_mathematica(node.operand)
            if node.operator is UnaryOperator.FACTORIAL:
                return f"Factorial[{operand}]"
            if node.operator is UnaryOperator.SQRT:
                return f"Sqrt[{operand}]"
            # "--x" is Decrement in Mathematica
            if operand.startswith("-"):
                operand = f"({operand})"
            return f"-{operand}"

        elif isinstance(node, BinaryOpNode):
            left = self._render_mathematica(node.left)
            right = self._render_mathematica(node.right)
            if node.operator is BinaryOperator.MODULO:
                return f"Mod[{left}, {right}]"
            if node.operator is BinaryOperator.POWER:
                return f"Power[{left}, {right}]"
            return f"({left} {node.operator.value} {right})"

        elif isinstance(node, EquationNode):
            return f"{self._render_mathematica(node.expression)} == {node.target}"

        else:
            raise TypeError(f"Unknown node type: {type(node)}")


def _is_additive(node: Node) -> bool:
    return isinstance(node, BinaryOpNode) and node.operator.precedence == 1


def _is_inline_multiplicative(node: Node) -> bool:
    # \frac already delimits a division
    return (
        isinstance(node, BinaryOpNode)
        and node.operator.precedence == 2
        and node.operator is not BinaryOperator.DIVIDE
    )


def _is_compound(node: Node) -> bool:
    if isinstance(node, BinaryOpNode):
        return True
    return isinstance(node, UnaryOpNode) and node.operator.is_prefix


def _latex_group(text: str) -> str:
    return f"\\left({text}\\right)"


# =============================================================================
# Convenience functions
# =============================================================================

def render(node: Node, format: str = "text") -> str:
    """Render a node in the given format."""
    return Renderer(format).render(node)


def render_to_text(node: Node) -> str:
    return Renderer("text").render(node)


def render_to_latex(node: Node) -> str:
    return Renderer("latex").render(node)


def render_to_mathematica(node: Node) -> str:
    return Renderer("mathematica").render(node)
