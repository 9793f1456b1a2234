"""Tests for expression nodes and evaluation."""

import dataclasses
import math

import pytest

from sum100.errors import (
    DivisionByZeroError,
    EvalError,
    FactorialDomainError,
    FactorialOverflowError,
    ModuloByZeroError,
    NonFiniteResultError,
    SqrtDomainError,
)
from sum100.expression.nodes import (
    BinaryOpNode,
    ConcatNode,
    EquationNode,
    NumberNode,
    UnaryOpNode,
    apply_binary,
    apply_unary,
    count_nodes,
    evaluate,
    factorial_depth,
    get_depth,
)
from sum100.expression.types import BinaryOperator, NodeType, UnaryOperator


def num(value: int) -> NumberNode:
    return NumberNode(value)


def neg(node):
    return UnaryOpNode("-", node)


class TestNodeConstruction:
    """Test building nodes."""

    def test_number_node(self):
        """Test a literal node."""
        node = NumberNode(7)

        assert node.node_type == NodeType.NUMBER
        assert node.children == ()
        assert node.to_string() == "7"
        assert node.evaluate() == 7.0

    def test_number_rejects_negative(self):
        """Test that literals are non-negative."""
        with pytest.raises(ValueError):
            NumberNode(-1)

    def test_concat_node(self):
        """Test joining digits into one literal."""
        node = ConcatNode((1, 2, 3))

        assert node.node_type == NodeType.CONCAT
        assert node.literal == 123
        assert node.to_string() == "123"
        assert evaluate(node) == 123.0

    def test_concat_with_leading_zero(self):
        """Test that a leading zero keeps its decimal meaning."""
        assert ConcatNode((0, 5)).literal == 5

    @pytest.mark.parametrize("digits", [(1,), (1, 2, 3, 4, 5)])
    def test_concat_length_bounds(self, digits):
        """Test that concatenation spans 2 to 4 digits."""
        with pytest.raises(ValueError):
            ConcatNode(digits)

    def test_operator_symbols_are_coerced(self):
        """Test that operators can be given by symbol."""
        unary = UnaryOpNode("!", num(3))
        binary = BinaryOpNode(num(1), "+", num(2))

        assert unary.operator is UnaryOperator.FACTORIAL
        assert binary.operator is BinaryOperator.ADD

    def test_unknown_symbol_rejected(self):
        """Test that an unknown operator symbol fails."""
        with pytest.raises(ValueError):
            BinaryOpNode(num(1), "&", num(2))

    def test_nodes_are_immutable(self):
        """Test that trees cannot be modified after construction."""
        node = BinaryOpNode(num(1), "+", num(2))

        with pytest.raises(dataclasses.FrozenInstanceError):
            node.left = num(5)

    def test_structural_equality(self):
        """Test that identically built trees are equal and hash alike."""
        a = BinaryOpNode(num(1), "*", UnaryOpNode("!", num(3)))
        b = BinaryOpNode(num(1), "*", UnaryOpNode("!", num(3)))

        assert a == b
        assert hash(a) == hash(b)


class TestCanonicalText:
    """Test the canonical text form."""

    def test_binary_is_parenthesized(self):
        """Test that every binary node carries its own parentheses."""
        node = BinaryOpNode(BinaryOpNode(num(1), "+", num(2)), "*", num(3))
        assert node.to_string() == "((1 + 2) * 3)"

    def test_prefix_and_postfix(self):
        """Test unary operator placement."""
        assert neg(num(3)).to_string() == "-3"
        assert UnaryOpNode("√", num(4)).to_string() == "√4"
        assert UnaryOpNode("!", num(3)).to_string() == "3!"

    def test_factorial_of_negation_is_grouped(self):
        """Test that (-3)! and -3! render differently."""
        fact_of_neg = UnaryOpNode("!", neg(num(3)))
        neg_of_fact = neg(UnaryOpNode("!", num(3)))

        assert fact_of_neg.to_string() == "(-3)!"
        assert neg_of_fact.to_string() == "-3!"

    def test_equation(self):
        """Test the equation form."""
        eq = EquationNode(BinaryOpNode(num(1), "+", num(2)), 3)

        assert eq.to_string() == "(1 + 2) = 3"
        assert str(eq) == eq.to_string()


class TestEvaluation:
    """Test evaluation and operator domains."""

    def test_division_by_zero(self):
        """Test 1 / 0 fails with a division error."""
        with pytest.raises(DivisionByZeroError):
            evaluate(BinaryOpNode(num(1), "/", num(0)))

    def test_factorial_of_negative(self):
        """Test (-1)! fails with a factorial domain error."""
        with pytest.raises(FactorialDomainError):
            evaluate(UnaryOpNode("!", neg(num(1))))

    def test_sqrt_of_negative(self):
        """Test √-1 fails with a square root domain error."""
        with pytest.raises(SqrtDomainError):
            evaluate(UnaryOpNode("√", neg(num(1))))

    def test_domain_errors_share_base(self):
        """Test that domain failures are EvalErrors and ArithmeticErrors."""
        with pytest.raises(EvalError):
            evaluate(BinaryOpNode(num(1), "%", num(0)))
        with pytest.raises(ArithmeticError):
            evaluate(BinaryOpNode(num(1), "%", num(0)))

    def test_small_factorials_and_roots(self):
        """Test boundary values."""
        assert apply_unary(UnaryOperator.FACTORIAL, 0) == 1.0
        assert apply_unary(UnaryOperator.FACTORIAL, 1) == 1.0
        assert apply_unary(UnaryOperator.SQRT, 0) == 0.0

    def test_factorial_of_fraction(self):
        """Test that factorial needs an integer."""
        with pytest.raises(FactorialDomainError):
            apply_unary(UnaryOperator.FACTORIAL, 2.5)

    def test_factorial_overflow(self):
        """Test that factorials beyond float range fail."""
        assert math.isfinite(apply_unary(UnaryOperator.FACTORIAL, 170))
        with pytest.raises(FactorialOverflowError):
            apply_unary(UnaryOperator.FACTORIAL, 171)

    def test_near_zero_divisor(self):
        """Test that divisors within epsilon of zero count as zero."""
        with pytest.raises(DivisionByZeroError):
            apply_binary(BinaryOperator.DIVIDE, 1, 1e-13)
        with pytest.raises(ModuloByZeroError):
            apply_binary(BinaryOperator.MODULO, 1, -1e-13)

    def test_modulo_takes_sign_of_dividend(self):
        """Test truncated remainder semantics."""
        assert apply_binary(BinaryOperator.MODULO, 7, 3) == 1.0
        assert apply_binary(BinaryOperator.MODULO, -7, 3) == -1.0
        assert apply_binary(BinaryOperator.MODULO, 7, -3) == 1.0

    def test_power_overflow(self):
        """Test that an overflowing power fails instead of returning inf."""
        with pytest.raises(NonFiniteResultError):
            apply_binary(BinaryOperator.POWER, 10, 400)

    def test_power_with_complex_result(self):
        """Test that a negative base with fractional exponent fails."""
        with pytest.raises(NonFiniteResultError):
            apply_binary(BinaryOperator.POWER, -8, 0.5)

    def test_zero_to_negative_power(self):
        """Test that 0 ^ -1 fails."""
        with pytest.raises(NonFiniteResultError):
            apply_binary(BinaryOperator.POWER, 0, -1)

    def test_evaluation_is_deterministic(self):
        """Test that evaluating the same tree twice gives the same value."""
        node = BinaryOpNode(UnaryOpNode("√", num(2)), "^", num(2))
        assert evaluate(node) == evaluate(node)
        assert abs(evaluate(node) - 2.0) < 1e-9

    def test_equation_validity(self):
        """Test EquationNode.is_valid."""
        good = EquationNode(BinaryOpNode(num(1), "+", num(2)), 3)
        bad = EquationNode(BinaryOpNode(num(1), "+", num(2)), 4)
        broken = EquationNode(BinaryOpNode(num(1), "/", num(0)), 1)

        assert good.is_valid()
        assert not bad.is_valid()
        assert not broken.is_valid()

    def test_unknown_node_type(self):
        """Test that evaluate rejects foreign objects."""
        with pytest.raises(TypeError):
            evaluate("1 + 2")


class TestTreeHelpers:
    """Test structural helpers."""

    def test_count_and_depth(self):
        """Test node count and depth."""
        node = BinaryOpNode(BinaryOpNode(num(1), "+", num(2)), "*", UnaryOpNode("!", num(3)))

        assert count_nodes(node) == 6
        assert get_depth(node) == 3

    def test_factorial_depth(self):
        """Test counting stacked factorials."""
        three = num(3)
        assert factorial_depth(three) == 0
        assert factorial_depth(UnaryOpNode("!", UnaryOpNode("!", three))) == 2
        assert factorial_depth(neg(UnaryOpNode("!", three))) == 0
