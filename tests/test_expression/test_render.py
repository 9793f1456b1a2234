"""Tests for text, LaTeX and Mathematica rendering."""

import pytest

from sum100.expression.nodes import BinaryOpNode, NumberNode
from sum100.expression.render import (
    Renderer,
    render,
    render_to_latex,
    render_to_mathematica,
    render_to_text,
)


class TestTextRendering:
    """Test the text format."""

    def test_text_is_canonical(self, parse):
        """Test that text rendering equals canonical text."""
        eq = parse("1 + 2 * 3 = 7")
        assert render_to_text(eq) == "(1 + (2 * 3)) = 7"
        assert render(eq) == eq.to_string()

    def test_render_many(self, parse):
        """Test rendering a list of equations."""
        equations = [parse("1 + 2 = 3"), parse("3! = 6")]
        assert Renderer("text").render_many(equations) == ["(1 + 2) = 3", "3! = 6"]

    def test_unknown_format(self):
        """Test that unknown formats are rejected."""
        with pytest.raises(ValueError):
            Renderer("html")


class TestLatexRendering:
    """Test the LaTeX format."""

    @pytest.mark.parametrize(
        "equation, expected",
        [
            ("(1 + 2) * 3 = 9", r"\left(1 + 2\right) \cdot 3 = 9"),
            ("1 + 2 * 3 = 7", r"1 + 2 \cdot 3 = 7"),
            ("6 / 3 = 2", r"\frac{6}{3} = 2"),
            ("√4 = 2", r"\sqrt{4} = 2"),
            ("2 ^ 3 = 8", r"2^{3} = 8"),
            ("(1 + 1) ^ 3 = 8", r"\left(1 + 1\right)^{3} = 8"),
            ("(1 + 2)! = 6", r"\left(1 + 2\right)! = 6"),
            ("3! = 6", r"3! = 6"),
            ("7 % 3 = 1", r"7 \bmod 3 = 1"),
            ("5 - (1 + 2) = 2", r"5 - \left(1 + 2\right) = 2"),
            ("-(1 + 2) = -3", r"-\left(1 + 2\right) = -3"),
            ("8 * (5 % 3) = 16", r"8 \cdot \left(5 \bmod 3\right) = 16"),
            ("8 * 5 % 3 = 1", r"8 \cdot 5 \bmod 3 = 1"),
            ("8 % (2 * 3) = 2", r"8 \bmod \left(2 \cdot 3\right) = 2"),
            ("8 * (6 / 3) = 16", r"8 \cdot \frac{6}{3} = 16"),
        ],
    )
    def test_latex(self, parse, equation, expected):
        """Test LaTeX output, grouping only where precedence requires."""
        assert render_to_latex(parse(equation)) == expected


class TestMathematicaRendering:
    """Test the Mathematica format."""

    @pytest.mark.parametrize(
        "equation, expected",
        [
            ("(1 + 2) * 3 = 9", "((1 + 2) * 3) == 9"),
            ("3! = 6", "Factorial[3] == 6"),
            ("√4 = 2", "Sqrt[4] == 2"),
            ("7 % 3 = 1", "Mod[7, 3] == 1"),
            ("2 ^ 3 = 8", "Power[2, 3] == 8"),
            ("- -3 = 3", "-(-3) == 3"),
        ],
    )
    def test_mathematica(self, parse, equation, expected):
        """Test Mathematica output."""
        assert render_to_mathematica(parse(equation)) == expected


class TestLatexGrouping:
    """Test that differently grouped trees never share a LaTeX rendering."""

    def test_right_nested_multiplicative(self):
        """Test 8 * (5 % 3) and (8 * 5) % 3 render differently."""
        right_nested = BinaryOpNode(NumberNode(8), "*", BinaryOpNode(NumberNode(5), "%", NumberNode(3)))
        left_nested = BinaryOpNode(BinaryOpNode(NumberNode(8), "*", NumberNode(5)), "%", NumberNode(3))

        assert right_nested.evaluate() == 16.0
        assert left_nested.evaluate() == 1.0
        assert render_to_latex(right_nested) != render_to_latex(left_nested)
