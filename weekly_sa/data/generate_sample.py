"""Generate a synthetic weekly series for trying out the adjustment.

Run: python -m weekly_sa.data.generate_sample
Creates: weekly_sa/data/sample_weekly.csv
"""

import numpy as np
import pandas as pd
from pathlib import Path


def generate_weekly_series(
    start_date: str = "2019-01-06",
    n_weeks: int = 260,  # 5 years
    base_level: float = 1000,
    trend_slope: float = 2.0,
    seasonal_amplitude: float = 200,
    noise_std: float = 10,
    spike_dates: list[str] | None = None,
    spike_size: float = 150,
    seed: int = 42,
) -> pd.DataFrame:
    """Weekly series = linear trend + yearly sine + spikes + Gaussian noise.

    The seasonal term follows the day of the year, so it matches one
    yearly trigonometric pair exactly. Returns a frame with ``date``,
    ``value`` and the noise-free ``trend`` and ``seasonal`` parts.
    """
    rng = np.random.default_rng(seed)

    dates = pd.date_range(start=start_date, periods=n_weeks, freq="7D")
    t = np.arange(n_weeks)

    trend = base_level + trend_slope * t

    n_days = np.where(dates.is_leap_year, 366.0, 365.0)
    seasonal = seasonal_amplitude * np.sin(2 * np.pi * dates.dayofyear.to_numpy() / n_days)

    spikes = np.zeros(n_weeks)
    for d in spike_dates or []:
        spikes[dates.get_loc(pd.Timestamp(d))] = spike_size

    noise = rng.normal(0, noise_std, n_weeks)

    return pd.DataFrame({
        "date": dates,
        "value": trend + seasonal + spikes + noise,
        "trend": trend,
        "seasonal": seasonal,
    })


if __name__ == "__main__":
    output_path = Path(__file__).parent / "sample_weekly.csv"
    df = generate_weekly_series(spike_dates=["2020-03-15", "2021-07-04", "2022-11-27"])
    df.to_csv(output_path, index=False)
    print(f"Sample data generated: {output_path}")
    print(f"  Shape: {df.shape}")
    print(f"  Date range: {df['date'].min()} to {df['date'].max()}")
    print(df.head())
