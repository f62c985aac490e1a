"""
Tests for the two-pass weekly seasonal adjustment.
"""

import numpy as np
import pandas as pd
import pytest

from weekly_sa.core.eda.trend import lowess_trend, moving_average_trend
from weekly_sa.core.errors import InputShapeMismatchError
from weekly_sa.core.features.holidays import holiday_window_factors
from weekly_sa.core.models import seasonal_adjustment as sa_module
from weekly_sa.core.models.results import AdjustmentResult
from weekly_sa.core.models.seasonal_adjustment import (
    AdjustmentConfig,
    WeeklySeasonalAdjuster,
    seasonal_adjust,
)

# Thanksgiving-like moving holiday, away from the injected spikes.
HOLIDAY_DATES = ["2019-11-28", "2020-11-26", "2021-11-25", "2022-11-24", "2023-11-23"]


@pytest.fixture(scope="module")
def spiky_result(spiky_frame):
    return seasonal_adjust(spiky_frame["value"], spiky_frame["date"])


class TestEndToEnd:
    """Synthetic series with a known seasonal pattern and spikes."""

    def test_recovers_yearly_order(self, spiky_result):
        assert not spiky_result.is_degenerate
        k, l = spiky_result.k_l
        assert k >= 2

    def test_detects_all_spikes(self, spiky_result, spike_dates):
        assert set(spike_dates) <= set(spiky_result.ao_list)
        assert spiky_result.ao_list == sorted(spiky_result.ao_list)
        for d in spike_dates:
            assert spiky_result.out_factors.loc[d] > 100

    def test_adjusted_series_is_smoother_than_detrended(self, spiky_result):
        residual = spiky_result.sa - spiky_result.trend
        assert residual.std() < spiky_result.detrended.std()

    def test_seasonal_factors_track_truth(self, spiky_result, spiky_frame):
        err = spiky_result.seasonal_factors.to_numpy() - spiky_frame["seasonal"].to_numpy()
        assert np.sqrt(np.mean(err ** 2)) < 20

    def test_additive_identity(self, spiky_result):
        total = spiky_result.sa + spiky_result.seasonal_factors + spiky_result.out_factors
        np.testing.assert_allclose(total.to_numpy(), spiky_result.x.to_numpy(), rtol=0, atol=1e-8)

    def test_outputs_aligned_with_dates(self, spiky_result, spiky_frame):
        assert len(spiky_result.sa) == len(spiky_frame)
        assert spiky_result.sa.index.equals(spiky_result.dates)
        assert spiky_result.trend.notna().all()
        np.testing.assert_array_equal(spiky_result.hol_factors.to_numpy(), 0.0)

    def test_model_and_beta(self, spiky_result):
        k, l = spiky_result.k_l
        n_cols = 2 * k + 2 * l + len(spiky_result.ao_list)
        assert len(spiky_result.model.params) == n_cols
        assert len(spiky_result.beta) == n_cols
        assert spiky_result.beta.name == 2023

    def test_to_frame(self, spiky_result):
        df = spiky_result.to_frame()
        assert list(df.columns) == ["date", "x", "sa", "trend", "seasonal", "holiday", "outlier"]
        assert len(df) == len(spiky_result.x)

    def test_summary_mentions_outliers(self, spiky_result, spike_dates):
        text = spiky_result.summary()
        assert "yearly" in text
        assert str(spike_dates[0].date()) in text


class TestModes:
    """Additive/multiplicative behaviour and optional inputs."""

    def test_multiplicative_identity(self, spiky_frame):
        result = seasonal_adjust(spiky_frame["value"], spiky_frame["date"], method="multiplicative")
        assert result.method == "multiplicative"
        product = result.sa * result.seasonal_factors * result.out_factors
        np.testing.assert_allclose(product.to_numpy(), spiky_frame["value"].to_numpy(), rtol=1e-8)
        assert (result.seasonal_factors > 0).all()
        assert result.seasonal_factors.mean() == pytest.approx(1.0, abs=0.05)

    def test_no_outlier_search_is_exact(self, clean_frame):
        result = seasonal_adjust(clean_frame["value"], clean_frame["date"], auto_ao_search=False)
        assert result.ao_list == []
        np.testing.assert_array_equal(result.out_factors.to_numpy(), 0.0)
        np.testing.assert_array_equal(result.sa.to_numpy(), (result.x - result.seasonal_factors).to_numpy())

    def test_fixed_outlier_kept(self, clean_frame):
        result = seasonal_adjust(
            clean_frame["value"],
            clean_frame["date"],
            auto_ao_search=False,
            ao_list=["2021-01-03", "2035-01-07"],
        )
        assert result.ao_list == [pd.Timestamp("2021-01-03")]
        assert result.model.params.index[-1] == "AO 2021-01-03"

    def test_pinned_order(self, clean_frame):
        result = seasonal_adjust(clean_frame["value"], clean_frame["date"], k_l=(6, 6))
        assert result.k_l == (6, 6)
        assert result.beta.index[0] == "S(1/Ny)"
        assert "S(1/Nm)" in result.beta.index

    @pytest.mark.parametrize("ic", ["aic", "aicc", "bic"])
    def test_information_criteria(self, clean_frame, ic):
        result = seasonal_adjust(clean_frame["value"], clean_frame["date"], ic=ic)
        assert result.k_l[0] >= 6

    def test_holiday_effects(self, clean_frame):
        dates = clean_frame["date"]
        H = holiday_window_factors(dates, {"thanksgiving": HOLIDAY_DATES}, before=1, after=3)
        x = clean_frame["value"] + 80 * H["thanksgiving"].to_numpy()

        result = seasonal_adjust(x, dates, holidays=H)

        assert "thanksgiving" in result.beta.index
        hol_rows = H["thanksgiving"].to_numpy() > 0
        assert result.hol_factors[hol_rows].mean() > 40
        np.testing.assert_allclose(result.hol_factors[~hol_rows].to_numpy(), 0.0, atol=1e-12)
        total = result.sa + result.seasonal_factors + result.out_factors
        np.testing.assert_allclose(total.to_numpy(), x.to_numpy(), atol=1e-8)

    def test_custom_smoother(self, clean_frame):
        result = seasonal_adjust(clean_frame["value"], clean_frame["date"], smoother=moving_average_trend)
        assert not result.is_degenerate
        assert result.trend.notna().all()


class TestTwoPass:
    """The second pass re-detrends the first-pass adjusted series."""

    def test_smoother_and_outlier_inputs(self, spiky_frame, spike_dates, monkeypatch):
        smoothed = []
        searches = []
        fits = []

        def recording_smoother(values):
            smoothed.append(np.array(values, copy=True))
            return lowess_trend(values)

        find_outliers = sa_module.find_outliers
        fit_year_weighted = sa_module.fit_year_weighted

        def recording_search(*args, **kwargs):
            searches.append(list(kwargs["fixed_ao"]))
            return find_outliers(*args, **kwargs)

        def recording_fit(*args, **kwargs):
            fit = fit_year_weighted(*args, **kwargs)
            fits.append(fit)
            return fit

        monkeypatch.setattr(sa_module, "find_outliers", recording_search)
        monkeypatch.setattr(sa_module, "fit_year_weighted", recording_fit)

        x = spiky_frame["value"].to_numpy()
        result = seasonal_adjust(x, spiky_frame["date"], ao_list=[spike_dates[0]], smoother=recording_smoother)

        assert len(smoothed) == 3
        np.testing.assert_allclose(smoothed[0], x)
        first = fits[0]
        np.testing.assert_allclose(smoothed[1], x - np.asarray(first.seasonal) - np.asarray(first.outlier))
        np.testing.assert_allclose(smoothed[2], result.sa.to_numpy())

        # Pass-1 detections are not carried into pass 2 as fixed outliers.
        assert searches == [[spike_dates[0]], [spike_dates[0]]]
        assert set(spike_dates) <= set(result.ao_list)


class TestDegenerate:
    """Series without seasonality end in the documented terminal state."""

    def test_white_noise(self, rng):
        dates = pd.date_range("2020-01-05", periods=156, freq="7D")
        x = 100 + rng.normal(0, 5, 156)

        result = seasonal_adjust(x, dates)

        assert isinstance(result, AdjustmentResult)
        assert result.is_degenerate
        assert result.k_l == (0, 0)
        assert result.sa is None and result.seasonal_factors is None and result.trend is None
        assert result.model is None and result.ao_list == []
        np.testing.assert_array_equal(result.x.to_numpy(), x)
        assert "k=l=0" in result.note

    def test_pinned_zero_order(self, clean_frame):
        result = seasonal_adjust(clean_frame["value"], clean_frame["date"], k_l=(0, 0))
        assert result.is_degenerate
        assert list(result.to_frame().columns) == ["date", "x"]


class TestAdjusterClass:
    """Tests for the config-driven adjuster."""

    def test_fit_and_params(self, clean_frame):
        adjuster = WeeklySeasonalAdjuster(AdjustmentConfig(r=0.6, k_l=(6, 0)))
        result = adjuster.fit(clean_frame["value"], clean_frame["date"])
        assert adjuster.result is result
        assert adjuster.get_params()["r"] == 0.6
        assert adjuster.summary() == result.summary()

    def test_unfitted(self):
        adjuster = WeeklySeasonalAdjuster()
        with pytest.raises(RuntimeError):
            _ = adjuster.result
        assert "Weekly SA" in adjuster.summary()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"r": 1.0},
            {"r": 0.0},
            {"ic": "hqic"},
            {"method": "log"},
            {"out_threshold": 0},
            {"k_l": (-6, 0)},
            {"k_l": (6,)},
        ],
    )
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            AdjustmentConfig(**kwargs)


class TestInputRejection:
    """Malformed input is rejected before any computation."""

    def test_length_mismatch(self, weekly_dates):
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(259), weekly_dates)

    def test_duplicate_dates(self, weekly_dates):
        dates = weekly_dates.insert(10, weekly_dates[10])[:260]
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(260), dates)

    def test_descending_dates(self, weekly_dates):
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(260), weekly_dates[::-1])

    def test_non_weekly_dates(self):
        dates = pd.date_range("2020-01-01", periods=200, freq="D")
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(200), dates)

    def test_numeric_dates(self):
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(10), np.arange(10))

    def test_holiday_rows(self, weekly_dates):
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(260), weekly_dates, holidays=np.ones((100, 1)))

    def test_non_numeric_holidays(self, weekly_dates):
        holidays = pd.DataFrame({"h": ["a"] * 260})
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(np.ones(260), weekly_dates, holidays=holidays)

    def test_missing_values(self, weekly_dates):
        x = np.ones(260)
        x[3] = np.nan
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(x, weekly_dates)

    def test_non_positive_multiplicative(self, weekly_dates):
        x = np.ones(260)
        x[0] = 0.0
        with pytest.raises(InputShapeMismatchError):
            seasonal_adjust(x, weekly_dates, method="multiplicative")

    def test_is_value_error(self):
        assert issubclass(InputShapeMismatchError, ValueError)


class TestTrendSmoothers:
    """Tests for the detrending smoothers."""

    def test_lowess_follows_linear_trend(self, rng):
        line = 5.0 + 0.3 * np.arange(200)
        trend = lowess_trend(line + rng.normal(0, 0.1, 200))
        np.testing.assert_allclose(trend, line, atol=0.2)

    def test_lowess_ignores_spike(self, rng):
        values = 2.0 * np.arange(260) + rng.normal(0, 1, 260)
        values[130] += 500
        trend = lowess_trend(values)
        assert abs(trend[130] - 260) < 5

    def test_moving_average_length(self):
        assert len(moving_average_trend(np.arange(30.0))) == 30
