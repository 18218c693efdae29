"""
Price Series Calculations

NumPy reductions used by structured providers that return a price
history instead of a single number.
"""

import numpy as np


def clean_closes(closes) -> np.ndarray:
    """Float array without NaNs."""
    data = np.asarray(closes, dtype=float)
    return data[~np.isnan(data)]


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    if len(data) < period:
        return np.full(len(data), np.nan)

    result = np.full(len(data), np.nan)
    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def percent_change(closes: np.ndarray, periods: int = 1) -> float:
    """Percent change of the last close versus the close `periods` bars earlier."""
    if len(closes) <= periods:
        return float("nan")
    previous = closes[-1 - periods]
    if previous == 0:
        return float("nan")
    return float((closes[-1] - previous) / previous * 100)


def sma_gap_percent(closes: np.ndarray, period: int) -> float:
    """Distance of the last close above (+) or below (-) its SMA, in percent."""
    average = sma(closes, period)
    if len(average) == 0 or np.isnan(average[-1]) or average[-1] == 0:
        return float("nan")
    return float((closes[-1] - average[-1]) / average[-1] * 100)
