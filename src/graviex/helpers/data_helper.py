"""DataFrame conversion for parsed market data.

This module provides:
- ohlcv_to_frame: Candle rows -> OHLCV DataFrame with a UTC datetime column.
"""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

OHLCV_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]
NUMERIC_COLUMNS = ["open", "high", "low", "close", "volume"]


def ohlcv_to_frame(candles: Sequence[Sequence[Optional[float]]]) -> pd.DataFrame:
    """Convert parsed OHLCV rows into a DataFrame.

    Parameters
    - candles: Rows of ``[timestamp_ms, open, high, low, close, volume]``

    Returns
    - pd.DataFrame: Columns timestamp, open, high, low, close, volume and
      ``open_time`` (UTC-aware). Unknown values are NaN/NaT.
    """
    df = pd.DataFrame(list(candles), columns=OHLCV_COLUMNS)
    df[NUMERIC_COLUMNS] = df[NUMERIC_COLUMNS].astype(float)
    df["timestamp"] = df["timestamp"].astype("Int64")
    df["open_time"] = pd.to_datetime(df["timestamp"].astype("float64"), unit="ms", utc=True)
    return df
