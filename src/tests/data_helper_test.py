import pandas as pd

from graviex.helpers.data_helper import ohlcv_to_frame


def test_ohlcv_to_frame():
    df = ohlcv_to_frame([
        [1700000000000, 1.0, 2.0, 0.5, 1.5, 10.0],
        [1700000060000, 1.5, 2.5, 1.0, 2.0, None],
    ])

    assert list(df.columns) == ["timestamp", "open", "high", "low", "close", "volume", "open_time"]
    assert df.loc[1, "timestamp"] == 1700000060000
    assert pd.isna(df.loc[1, "volume"])
    assert df.loc[0, "open_time"] == pd.Timestamp("2023-11-14 22:13:20", tz="UTC")
    assert pd.api.types.is_float_dtype(df["close"])


def test_ohlcv_to_frame_empty():
    df = ohlcv_to_frame([])
    assert df.empty
    assert "open_time" in df.columns
