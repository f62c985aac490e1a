"""
Pytest configuration and shared fixtures for the weekly adjustment tests.
"""

import numpy as np
import pandas as pd
import pytest

from weekly_sa.data.generate_sample import generate_weekly_series

SPIKE_DATES = ["2020-03-15", "2021-07-04", "2022-11-27"]


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def spike_dates():
    return [pd.Timestamp(d) for d in SPIKE_DATES]


@pytest.fixture(scope="session")
def spiky_frame():
    """Five years of trend + yearly sine + three 15-sigma spikes."""
    return generate_weekly_series(spike_dates=SPIKE_DATES, noise_std=10, spike_size=150)


@pytest.fixture(scope="session")
def clean_frame():
    """Five years of trend + yearly sine, no spikes."""
    return generate_weekly_series(noise_std=10, seed=7)


@pytest.fixture
def weekly_dates():
    return pd.date_range("2019-01-06", periods=260, freq="7D")
