"""Parsers for puzzle input and written equations.

Two grammars:
- Puzzle input: "1 2 3 4 5 6 7 8 9 = 100" -> digits + target
- Equation: "(1 + 2) * 3! = 18" -> EquationNode

Equation grammar (lowest to highest precedence):
    equation := expr "=" integer
    expr     := term (("+" | "-") term)*
    term     := power (("*" | "/" | "%") power)*
    power    := unary ("^" power)?          right associative
    unary    := ("-" | "√") unary | postfix
    postfix  := primary "!"*
    primary  := integer | "(" expr ")"
"""

from dataclasses import dataclass
import re

from sum100.errors import ParseError
from sum100.expression.nodes import (
    BinaryOpNode,
    EquationNode,
    Node,
    NumberNode,
    UnaryOpNode,
)
from sum100.expression.types import BinaryOperator, UnaryOperator


_INTEGER_RE = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class Token:
    """Lexical token.

    Attributes:
        kind: NUMBER, OPERATOR, FACTORIAL, SQRT, LPAREN, RPAREN, EQUALS or EOF
        value: Source text of the token
        position: Offset of the token in the input
    """

    kind: str
    value: str
    position: int


class Lexer:
    """Splits equation text into tokens."""

    SINGLE_CHAR_TOKENS: dict[str, str] = {
        "=": "EQUALS",
        "+": "OPERATOR",
        "-": "OPERATOR",
        "*": "OPERATOR",
        "/": "OPERATOR",
        "%": "OPERATOR",
        "^": "OPERATOR",
        "!": "FACTORIAL",
        "√": "SQRT",
        "(": "LPAREN",
        ")": "RPAREN",
    }

    # Common typographic variants
    ALIASES: dict[str, str] = {"×": "*", "·": "*", "÷": "/", "−": "-"}

    def __init__(self, text: str):
        self.text = text

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pos = 0
        while pos < len(self.text):
            char = self.ALIASES.get(self.text[pos], self.text[pos])

            if char.isspace():
                pos += 1
            elif char.isdecimal():
                start = pos
                while pos < len(self.text) and self.text[pos].isdecimal():
                    pos += 1
                tokens.append(Token("NUMBER", self.text[start:pos], start))
            elif char in self.SINGLE_CHAR_TOKENS:
                tokens.append(Token(self.SINGLE_CHAR_TOKENS[char], char, pos))
                pos += 1
            else:
                raise ParseError(f"Unexpected character: {char!r}", pos)

        tokens.append(Token("EOF", "", len(self.text)))
        return tokens


class Parser:
    """Recursive-descent parser for written equations."""

    def __init__(self) -> None:
        self._tokens: list[Token] = []
        self._pos = 0

    def parse(self, text: str) -> EquationNode:
        """Parse "expression = target" into an EquationNode.

        Raises:
            ParseError: If the text does not match the grammar
        """
        self._tokens = Lexer(text).tokenize()
        self._pos = 0

        expression = self._parse_expression()

        if self._current.kind != "EQUALS":
            raise ParseError("Expected '='", self._current.position)
        self._advance()

        target = self._parse_target()

        if self._current.kind != "EOF":
            raise ParseError(
                f"Unexpected token after target: {self._current.value!r}",
                self._current.position,
            )

        return EquationNode(expression=expression, target=target)

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.kind != "EOF":
            self._pos += 1
        return token

    def _is_operator(self, *symbols: str) -> bool:
        return self._current.kind == "OPERATOR" and self._current.value in symbols

    def _parse_target(self) -> int:
        sign = 1
        if self._is_operator("-", "+"):
            sign = -1 if self._advance().value == "-" else 1
        if self._current.kind != "NUMBER":
            raise ParseError("Expected target number after '='", self._current.position)
        return sign * int(self._advance().value)

    def _parse_expression(self) -> Node:
        left = self._parse_term()
        while self._is_operator("+", "-"):
            op = BinaryOperator.from_symbol(self._advance().value)
            right = self._parse_term()
            left = BinaryOpNode(left, op, right)
        return left

    def _parse_term(self) -> Node:
        left = self._parse_power()
        while self._is_operator("*", "/", "%"):
            op = BinaryOperator.from_symbol(self._advance().value)
            right = self._parse_power()
            left = BinaryOpNode(left, op, right)
        return left

    def _parse_power(self) -> Node:
        left = self._parse_unary()
        if self._is_operator("^"):
            self._advance()
            right = self._parse_power()
            left = BinaryOpNode(left, BinaryOperator.POWER, right)
        return left

    def _parse_unary(self) -> Node:
        if self._is_operator("-"):
            self._advance()
            return UnaryOpNode(UnaryOperator.NEGATE, self._parse_unary())
        if self._current.kind == "SQRT":
            self._advance()
            return UnaryOpNode(UnaryOperator.SQRT, self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> Node:
        node = self._parse_primary()
        while self._current.kind == "FACTORIAL":
            self._advance()
            node = UnaryOpNode(UnaryOperator.FACTORIAL, node)
        return node

    def _parse_primary(self) -> Node:
        token = self._current
        if token.kind == "NUMBER":
            self._advance()
            return NumberNode(int(token.value))

        if token.kind == "LPAREN":
            self._advance()
            expression = self._parse_expression()
            if self._current.kind != "RPAREN":
                raise ParseError("Expected closing parenthesis", self._current.position)
            self._advance()
            return expression

        if token.kind == "EOF":
            raise ParseError("Unexpected end of input", token.position)
        raise ParseError(f"Unexpected token: {token.value!r}", token.position)


# =============================================================================
# Puzzle input
# =============================================================================

@dataclass(frozen=True)
class ParsedInput:
    """Digits and target extracted from puzzle input."""

    digits: tuple[int, ...]
    target: int


def parse_number_sequence(text: str) -> list[int]:
    """Parse whitespace-separated non-negative integers."""
    tokens = text.split()
    if not tokens:
        raise ParseError("Expected at least one number")

    numbers = []
    for token in tokens:
        if not token.isdecimal():
            raise ParseError(f"Invalid number: {token!r}")
        numbers.append(int(token))
    return numbers


def parse_input(text: str) -> ParsedInput:
    """Parse "d1 d2 ... dn = target".

    Raises:
        ParseError: If '=' is missing or repeated, a digit token is not a
            non-negative integer, or the target is not an integer
    """
    parts = text.split("=")
    if len(parts) != 2:
        raise ParseError("Input must contain exactly one '=' sign")

    digits = parse_number_sequence(parts[0])

    target_text = parts[1].strip()
    if not _INTEGER_RE.fullmatch(target_text):
        raise ParseError(f"Invalid target number: {target_text!r}")

    return ParsedInput(digits=tuple(digits), target=int(target_text))
