"""Tests for solver configuration."""

import pytest

from sum100.config import OPERATOR_FLAGS, SolverConfig
from sum100.errors import ConfigError
from sum100.expression.types import BinaryOperator, UnaryOperator


class TestSolverConfig:
    """Test SolverConfig defaults and helpers."""

    def test_defaults(self):
        """Test default limits and operator switches."""
        config = SolverConfig()

        assert config.max_attempts == 1_000_000
        assert config.timeout == 30.0
        assert config.max_depth == 8
        assert config.max_factorial_depth == 3
        assert config.cache_size == 10_000
        assert config.enable_concatenation
        assert len(config.binary_operators) == 6
        assert len(config.unary_operators) == 3

    def test_operator_order(self):
        """Test that enabled operators keep their search order."""
        config = SolverConfig(enable_subtraction=False, enable_square_root=False)

        assert config.binary_operators == [
            BinaryOperator.ADD,
            BinaryOperator.MULTIPLY,
            BinaryOperator.DIVIDE,
            BinaryOperator.MODULO,
            BinaryOperator.POWER,
        ]
        assert config.unary_operators == [UnaryOperator.FACTORIAL, UnaryOperator.NEGATE]

    def test_with_disabled(self):
        """Test switching off families by short name."""
        config = SolverConfig().with_disabled("add", "fact")

        assert not config.enable_addition
        assert not config.enable_factorial
        assert config.enable_multiplication
        assert BinaryOperator.ADD not in config.binary_operators

    def test_with_disabled_returns_copy(self):
        """Test that the original config is untouched."""
        original = SolverConfig()
        original.with_disabled("add")

        assert original.enable_addition

    def test_only(self):
        """Test enabling a single family."""
        config = SolverConfig().only("concat")

        assert config.enable_concatenation
        assert config.binary_operators == []
        assert config.unary_operators == []

    def test_unknown_operator(self):
        """Test that unknown short names are rejected."""
        with pytest.raises(ConfigError):
            SolverConfig().with_disabled("xor")

    def test_short_names_cover_every_flag(self):
        """Test that every enable_* field has a short name."""
        flags = {name for name in SolverConfig().to_dict() if name.startswith("enable_")}
        assert flags == set(OPERATOR_FLAGS.values())

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_attempts": 0},
            {"timeout": 0},
            {"max_depth": 0},
            {"max_solutions": 0},
            {"cache_size": 0},
            {"report_interval": -1},
            {"max_factorial_depth": -1},
            {"max_concat_length": 5},
            {"max_concat_length": 1},
        ],
    )
    def test_validate(self, overrides):
        """Test out-of-range limits."""
        with pytest.raises(ConfigError):
            SolverConfig(**overrides).validate()

    def test_dict_round_trip(self):
        """Test to_dict / from_dict."""
        config = SolverConfig(timeout=5.0, enable_power=False)
        assert SolverConfig.from_dict(config.to_dict()) == config

    def test_from_dict_ignores_unknown_and_none(self):
        """Test lenient dict loading."""
        config = SolverConfig.from_dict({"timeout": None, "max_depth": 3, "color": "red"})

        assert config.timeout == 30.0
        assert config.max_depth == 3


class TestConfigFromEnv:
    """Test environment overrides."""

    def test_overrides(self):
        """Test typed SUM100_* variables."""
        config = SolverConfig.from_env({
            "SUM100_TIMEOUT": "5",
            "SUM100_MAX_ATTEMPTS": "1_000",
            "SUM100_ENABLE_POWER": "false",
            "SUM100_ENABLE_MODULO": "Off",
            "UNRELATED": "x",
        })

        assert config.timeout == 5.0
        assert config.max_attempts == 1000
        assert not config.enable_power
        assert not config.enable_modulo
        assert config.enable_addition

    def test_empty_environment(self):
        """Test that no variables means defaults."""
        assert SolverConfig.from_env({}) == SolverConfig()

    @pytest.mark.parametrize(
        "env",
        [
            {"SUM100_ENABLE_POWER": "maybe"},
            {"SUM100_MAX_DEPTH": "deep"},
            {"SUM100_TIMEOUT": "-1"},
        ],
    )
    def test_invalid_values(self, env):
        """Test that bad values raise ConfigError."""
        with pytest.raises(ConfigError):
            SolverConfig.from_env(env)

    def test_reads_process_environment(self, monkeypatch):
        """Test reading os.environ when no mapping is given."""
        monkeypatch.setenv("SUM100_MAX_SOLUTIONS", "3")
        assert SolverConfig.from_env().max_solutions == 3
