"""
Tests for z-score standardization.
"""

import numpy as np
import pytest

from mailcluster.clustering.scaler import Scaler, apply_scaler, apply_scaler_to_row, fit_scaler


class TestFitScaler:
    """Test fitting means and standard deviations."""

    def test_mean_and_sample_std(self):
        scaler = fit_scaler([[1, 10], [2, 20], [3, 30]])
        assert scaler.mean.tolist() == pytest.approx([2.0, 20.0])
        # Sample std (divisor n-1): sqrt(((1)^2 + 0 + 1^2) / 2) = 1
        assert scaler.std.tolist() == pytest.approx([1.0, 10.0])

    def test_single_row_std_is_one(self):
        scaler = fit_scaler([[5, -3, 0.25]])
        assert scaler.std.tolist() == [1.0, 1.0, 1.0]
        assert scaler.mean.tolist() == [5.0, -3.0, 0.25]

    def test_constant_column_clamped(self):
        scaler = fit_scaler([[7, 1], [7, 2], [7, 3]])
        assert scaler.std[0] == 1.0
        assert scaler.std[1] == pytest.approx(1.0)

    def test_empty_matrix(self):
        scaler = fit_scaler([])
        assert scaler.n_features == 0
        assert len(scaler.std) == 0

    def test_missing_entries_count_as_zero(self):
        scaler = fit_scaler([[None, 2], [4, "bad"]])
        assert scaler.mean.tolist() == pytest.approx([2.0, 1.0])

    def test_std_never_zero_or_non_finite(self):
        scaler = fit_scaler([[0, 1e-12, 3], [0, 2e-12, 3]])
        assert np.all(np.isfinite(scaler.std))
        assert np.all(scaler.std > 0)

    def test_deterministic(self):
        rows = [[0.1, 2.5], [3.3, -1.0], [7.0, 0.0]]
        first, second = fit_scaler(rows), fit_scaler(rows)
        assert first.mean.tolist() == second.mean.tolist()
        assert first.std.tolist() == second.std.tolist()

    def test_scaler_is_read_only(self):
        scaler = fit_scaler([[1, 2], [3, 4]])
        with pytest.raises(ValueError):
            scaler.mean[0] = 100.0


class TestApplyScaler:
    """Test projecting rows into scaled space."""

    def test_standardizes_columns(self):
        rows = [[1, 10], [2, 20], [3, 30]]
        scaled = apply_scaler(rows, fit_scaler(rows))
        assert scaled[:, 0].tolist() == pytest.approx([-1.0, 0.0, 1.0])
        assert scaled[:, 1].tolist() == pytest.approx([-1.0, 0.0, 1.0])

    def test_missing_scaler_is_identity_copy(self):
        rows = [[1, 2], [3, 4]]
        assert apply_scaler(rows, None).tolist() == [[1.0, 2.0], [3.0, 4.0]]
        assert apply_scaler_to_row([1, 2], None).tolist() == [1.0, 2.0]

    def test_malformed_scaler_is_identity(self):
        assert apply_scaler_to_row([1, 2], {"mean": [1, 1]}).tolist() == [1.0, 2.0]

    def test_row_longer_than_scaler(self):
        """Columns beyond the fitted ones pass through with mean 0, std 1."""
        scaler = Scaler(mean=np.array([1.0]), std=np.array([2.0]))
        assert apply_scaler_to_row([5, 7], scaler).tolist() == [2.0, 7.0]

    def test_row_shorter_than_scaler(self):
        scaler = Scaler(mean=np.array([1.0, 2.0]), std=np.array([2.0, 4.0]))
        assert apply_scaler_to_row([5], scaler).tolist() == [2.0]

    def test_row_and_matrix_agree(self):
        rows = [[1.5, 2.0], [0.0, -4.0], [3.0, 8.0]]
        scaler = fit_scaler(rows)
        scaled = apply_scaler(rows, scaler)
        for i, row in enumerate(rows):
            assert apply_scaler_to_row(row, scaler).tolist() == scaled[i].tolist()

    def test_short_matrix_rows_stay_zero_past_their_end(self):
        """Padding happens after scaling, so missing cells are 0 in scaled space."""
        rows = [[1, 2], [3]]
        scaler = fit_scaler(rows)
        scaled = apply_scaler(rows, scaler)
        assert scaled[1, 1] == 0.0
        assert scaled[1, 0] == apply_scaler_to_row([3], scaler)[0]
