"""Unit tests for PERT estimation."""

import math

import pytest

from project_estimator.errors import InvalidDurationError, ValidationError
from project_estimator.estimation import estimate, validate_durations


class TestEstimate:
    """Tests for estimate()."""

    def test_requirements_analysis_example(self):
        """Test (16, 24, 40) gives expected 25.33 and std dev 4."""
        result = estimate(16, 24, 40)
        assert result.expected == pytest.approx(25.3333, abs=1e-4)
        assert result.std_dev == pytest.approx(4.0)
        assert result.variance == pytest.approx(16.0)

    def test_confidence_intervals(self):
        result = estimate(16, 24, 40)
        assert result.ci68 == pytest.approx((21.3333, 29.3333), abs=1e-4)
        assert result.ci95 == pytest.approx((17.3333, 33.3333), abs=1e-4)

    @pytest.mark.parametrize("durations", [
        (1, 1, 1),
        (0.1, 0.5, 1000),
        (3, 3, 9),
        (2, 7, 7),
        (4.5, 6.25, 19.75),
    ])
    def test_intervals_nest_around_expected(self, durations):
        """Test 95% interval contains the 68% interval, which contains the mean."""
        result = estimate(*durations)
        assert result.ci68[0] <= result.expected <= result.ci68[1]
        assert result.ci95[0] <= result.ci68[0]
        assert result.ci95[1] >= result.ci68[1]

    def test_equal_estimates_have_no_spread(self):
        result = estimate(5, 5, 5)
        assert result.expected == 5
        assert result.std_dev == 0
        assert result.ci95 == (5, 5)

    def test_deterministic(self):
        assert estimate(2, 3, 7) == estimate(2, 3, 7)

    def test_to_dict(self):
        data = estimate(16, 24, 40).to_dict()
        assert data['std_dev'] == 4.0
        assert isinstance(data['ci68'], list)


class TestValidation:
    """Tests for duration validation."""

    @pytest.mark.parametrize("durations", [
        (0, 1, 2),
        (-1, 1, 2),
        (1, 1, 0),
    ])
    def test_non_positive_rejected(self, durations):
        with pytest.raises(InvalidDurationError):
            estimate(*durations)

    @pytest.mark.parametrize("durations", [
        (5, 3, 10),
        (1, 10, 5),
        (10, 5, 1),
    ])
    def test_unordered_rejected(self, durations):
        """Test ordering is reported, never corrected."""
        with pytest.raises(InvalidDurationError) as exc_info:
            estimate(*durations)
        assert exc_info.value.optimistic == durations[0]
        assert exc_info.value.pessimistic == durations[2]

    def test_nan_rejected(self):
        with pytest.raises(InvalidDurationError):
            validate_durations(math.nan, 1, 2)

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidDurationError):
            validate_durations("1", 2, 3)

    def test_is_validation_error(self):
        with pytest.raises(ValidationError):
            validate_durations(3, 2, 1)
