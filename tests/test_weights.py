"""
Tests for error-to-weight conversion.
"""
import numpy as np
import pytest

from heteroforest.exceptions import ConfigError, NumericError, UnsupportedOptionError
from heteroforest.weights import WeightingFormula, compute_weights


class TestWeightingFormula:
    """Tests for formula parsing."""

    @pytest.mark.parametrize("name,expected", [
        ("boost", WeightingFormula.BOOST),
        ("reciprocal", WeightingFormula.RECIPROCAL),
        ("square", WeightingFormula.SQUARE),
        ("rec", WeightingFormula.RECIPROCAL),
        ("sq", WeightingFormula.SQUARE),
        ("  BOOST ", WeightingFormula.BOOST),
        (WeightingFormula.SQUARE, WeightingFormula.SQUARE),
    ])
    def test_parse(self, name, expected):
        """Values, short names and the enum itself resolve."""
        assert WeightingFormula.parse(name) is expected

    def test_unknown_formula(self):
        """Unknown names raise UnsupportedOptionError, a ConfigError."""
        with pytest.raises(UnsupportedOptionError, match="Unknown weighting formula"):
            WeightingFormula.parse("cubic")
        assert issubclass(UnsupportedOptionError, ConfigError)


class TestComputeWeights:
    """Tests for compute_weights."""

    def test_boost(self):
        """boost: ln((1 - e) / e)."""
        weights = compute_weights(np.array([0.25, 0.1]), "boost")
        np.testing.assert_allclose(weights, [np.log(3.0), np.log(9.0)])

    def test_reciprocal(self):
        """reciprocal: (1 - 2e) / e."""
        weights = compute_weights(np.array([0.25, 0.1]), "reciprocal")
        np.testing.assert_allclose(weights, [2.0, 8.0])

    def test_square(self):
        """square: (1 - 2e) / e^2."""
        weights = compute_weights(np.array([0.25, 0.1]), "square")
        np.testing.assert_allclose(weights, [8.0, 80.0])

    @pytest.mark.parametrize("formula", list(WeightingFormula))
    def test_worse_than_chance_clamped_to_zero(self, formula):
        """Errors above 0.5 (and e = 1) give weight 0, never negative or -inf."""
        weights = compute_weights(np.array([0.6, 0.9, 1.0]), formula)
        np.testing.assert_array_equal(weights, [0.0, 0.0, 0.0])

    @pytest.mark.parametrize("formula", list(WeightingFormula))
    def test_chance_level_gives_zero(self, formula):
        """e = 0.5 is exactly zero weight."""
        assert compute_weights(np.array([0.5]), formula)[0] == pytest.approx(0.0)

    def test_matrix_shape_preserved(self):
        """Per-level matrices are weighted element-wise."""
        errors = np.array([[0.25, 0.5], [0.1, 0.75]])
        weights = compute_weights(errors, "reciprocal")
        assert weights.shape == (2, 2)
        np.testing.assert_allclose(weights, [[2.0, 0.0], [8.0, 0.0]])

    def test_small_errors_give_large_finite_weights(self):
        """Floored errors stay finite."""
        weights = compute_weights(np.array([1e-4]), "square")
        assert np.isfinite(weights).all()
        assert weights[0] > 1e7

    @pytest.mark.parametrize("bad", [0.0, -0.1, 1.5, np.nan])
    def test_invalid_errors_raise(self, bad):
        """Errors outside (0, 1] must be floored before weighting."""
        with pytest.raises(NumericError, match="floor_errors"):
            compute_weights(np.array([0.2, bad]), "boost")
