"""Solver configuration.

Defaults can be overridden from the environment (or a .env file) with
SUM100_* variables, e.g. SUM100_TIMEOUT=10 or SUM100_ENABLE_POWER=false.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import logging
import os
from typing import Any

from dotenv import load_dotenv

from sum100.errors import ConfigError
from sum100.expression.types import (
    BINARY_OPERATORS,
    UNARY_OPERATORS,
    BinaryOperator,
    UnaryOperator,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "SUM100_"

# Operator family -> enable flag on SolverConfig
UNARY_FLAGS: dict[UnaryOperator, str] = {
    UnaryOperator.FACTORIAL: "enable_factorial",
    UnaryOperator.SQRT: "enable_square_root",
    UnaryOperator.NEGATE: "enable_negation",
}

BINARY_FLAGS: dict[BinaryOperator, str] = {
    BinaryOperator.ADD: "enable_addition",
    BinaryOperator.SUBTRACT: "enable_subtraction",
    BinaryOperator.MULTIPLY: "enable_multiplication",
    BinaryOperator.DIVIDE: "enable_division",
    BinaryOperator.MODULO: "enable_modulo",
    BinaryOperator.POWER: "enable_power",
}

# Short names accepted by the CLI and the API
OPERATOR_FLAGS: dict[str, str] = {
    "concat": "enable_concatenation",
    "add": "enable_addition",
    "sub": "enable_subtraction",
    "mul": "enable_multiplication",
    "div": "enable_division",
    "pow": "enable_power",
    "fact": "enable_factorial",
    "sqrt": "enable_square_root",
    "neg": "enable_negation",
    "mod": "enable_modulo",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class SolverConfig:
    """Configuration for the expression search.

    Attributes:
        max_attempts: Stop after this many recursive steps
        timeout: Wall-clock budget in seconds
        max_factorial_depth: Maximum number of stacked factorials (3!! is 2)
        max_depth: Maximum number of construction steps from the first operand
        max_concat_length: Longest run of digits joined into one literal (2-4)
        factorial_ceiling: Largest operand the search applies factorial to
        max_solutions: Stop once this many distinct solutions are found
        cache_size: Evaluation cache is cleared when it grows past this
        report_interval: Minimum seconds between progress events
        enable_*: Per operator family switches
    """

    max_attempts: int = 1_000_000
    timeout: float = 30.0
    max_factorial_depth: int = 3
    max_depth: int = 8
    max_concat_length: int = 4
    factorial_ceiling: int = 15
    max_solutions: int = 10
    cache_size: int = 10_000
    report_interval: float = 0.1

    enable_concatenation: bool = True
    enable_addition: bool = True
    enable_subtraction: bool = True
    enable_multiplication: bool = True
    enable_division: bool = True
    enable_power: bool = True
    enable_factorial: bool = True
    enable_square_root: bool = True
    enable_negation: bool = True
    enable_modulo: bool = True

    def validate(self) -> None:
        """Raise ConfigError if any limit is out of range."""
        for name in ("max_attempts", "max_depth", "max_solutions", "cache_size"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be > 0, got {self.timeout}")
        if self.report_interval < 0:
            raise ConfigError(f"report_interval must be >= 0, got {self.report_interval}")
        if self.max_factorial_depth < 0:
            raise ConfigError(f"max_factorial_depth must be >= 0, got {self.max_factorial_depth}")
        if self.factorial_ceiling < 0:
            raise ConfigError(f"factorial_ceiling must be >= 0, got {self.factorial_ceiling}")
        if not 2 <= self.max_concat_length <= 4:
            raise ConfigError(
                f"max_concat_length must be between 2 and 4, got {self.max_concat_length}"
            )

    @property
    def unary_operators(self) -> list[UnaryOperator]:
        """Enabled unary operators in search order."""
        return [op for op in UNARY_OPERATORS if getattr(self, UNARY_FLAGS[op])]

    @property
    def binary_operators(self) -> list[BinaryOperator]:
        """Enabled binary operators in search order."""
        return [op for op in BINARY_OPERATORS if getattr(self, BINARY_FLAGS[op])]

    def with_disabled(self, *names: str) -> SolverConfig:
        """Return a copy with the named operator families switched off.

        Names are the short forms in OPERATOR_FLAGS ("add", "fact", ...).
        """
        unknown = [n for n in names if n not in OPERATOR_FLAGS]
        if unknown:
            raise ConfigError(f"Unknown operators: {unknown}. Valid: {sorted(OPERATOR_FLAGS)}")
        return replace(self, **{OPERATOR_FLAGS[n]: False for n in names})

    def only(self, *names: str) -> SolverConfig:
        """Return a copy with only the named operator families enabled."""
        return self.with_disabled(*(n for n in OPERATOR_FLAGS if n not in names))

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SolverConfig:
        """Build a config from a dict, ignoring None values and unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> SolverConfig:
        """Build a config from SUM100_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (loads .env first
                     when reading the real environment)
        """
        if environ is None:
            load_dotenv()
            environ = dict(os.environ)

        overrides: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            overrides[f.name] = _coerce(f.name, f.type, raw)
            logger.debug(f"Config override from environment: {f.name}={overrides[f.name]}")

        config = cls(**overrides)
        config.validate()
        return config


def _coerce(name: str, type_name: Any, raw: str) -> Any:
    # Annotations are strings under `from __future__ import annotations`
    type_name = getattr(type_name, "__name__", type_name)
    value = raw.strip().lower()
    try:
        if type_name == "bool":
            if value in _TRUE:
                return True
            if value in _FALSE:
                return False
            raise ValueError(raw)
        if type_name == "int":
            return int(value.replace("_", ""))
        return float(value)
    except ValueError:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
