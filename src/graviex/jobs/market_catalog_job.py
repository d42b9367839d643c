"""Market Catalog Job

Loads the Graviex market catalog and logs a summary of it.

The job:
1. Reads configuration from config/graviex_config.json
2. Loads every market from the tickers endpoint
3. Logs active/inactive counts and the top markets by quote volume

Useful as a connectivity check before starting anything that trades.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from graviex.core.config import GraviexConfig, load_config
from graviex.exchanges.graviex import GraviexAdapter
from graviex.utils.logger import setup_logger

ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = ROOT / "config" / "graviex_config.json"
DEFAULT_LOG_PATH = ROOT / "logs" / "market_catalog_job.log"


def init(
    config_path: Path = DEFAULT_CONFIG_PATH,
    log_path: Optional[Path] = DEFAULT_LOG_PATH,
) -> tuple[GraviexConfig, logging.Logger]:
    config = load_config(config_path)
    logger = setup_logger("market_catalog_job", log_path)
    logger.info("========== Graviex market catalog job starting ==========")
    logger.info(f"Config loaded from: {config_path}")
    return config, logger


def summarize_catalog(adapter: GraviexAdapter, logger: logging.Logger, top: int = 10) -> dict:
    """Load markets and tickers and log a summary.

    Returns:
        Dictionary with ``total``, ``active`` and ``top`` (symbols by quote volume)
    """
    markets = adapter.load_markets(reload=True)
    active = [symbol for symbol, market in markets.items() if market.active]
    logger.info(f"{len(markets)} markets, {len(active)} active.")

    tickers = adapter.fetch_tickers(active)
    ranked = sorted(
        (t for t in tickers.values() if t.quote_volume is not None),
        key=lambda t: t.quote_volume,
        reverse=True,
    )[:top]
    for ticker in ranked:
        logger.info(
            f"  {ticker.symbol:12s} last={ticker.last} "
            f"change={ticker.percentage} quote_volume={ticker.quote_volume}"
        )
    return {
        "total": len(markets),
        "active": len(active),
        "top": [t.symbol for t in ranked],
    }


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config_path = Path(argv[0]) if argv else DEFAULT_CONFIG_PATH
    config, logger = init(config_path)
    adapter = GraviexAdapter(config, logger=logger)
    try:
        summarize_catalog(adapter, logger)
    finally:
        adapter.close()
    logger.info("========== Graviex market catalog job finished ==========")
    return 0


if __name__ == "__main__":
    sys.exit(main())
