#!/usr/bin/env python3

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import pandas as pd

from config.nifty_symbols import NIFTY50_SYMBOLS
from config.settings import settings, ScannerConfig
from nse_scanner.analyzers.utils import format_number, format_percent, get_ema_summary, percent_to_ema
from nse_scanner.data.models import EmaScanResult, SymbolInfo
from nse_scanner.integrations.nse_client import nse_client
from nse_scanner.integrations.synthetic_history import SyntheticHistoryProvider
from nse_scanner.scanner.orchestrator import EmaScanner
from nse_scanner.scanner.presets import PRESET_DESCRIPTIONS, ScanPreset, resolve_preset
from nse_scanner.scanner.results import clamp_page, filter_results, paginate, total_pages

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan NSE stocks for their position relative to EMAs.")
    parser.add_argument(
        "--preset",
        choices=[preset.value for preset in ScanPreset],
        default=ScanPreset.NIFTY50.value,
        help="Symbol list to scan.",
    )
    parser.add_argument(
        "--symbols",
        help="Comma-separated symbols (e.g. RELIANCE,TCS,INFY). Overrides --preset.",
    )
    parser.add_argument("--search", default="", help="Filter by symbol or company name.")
    parser.add_argument(
        "--filter",
        choices=ScannerConfig.RELATION_FILTERS,
        default=ScannerConfig.FILTER_ALL,
        help="Show only stocks above or below the selected EMA.",
    )
    parser.add_argument(
        "--ema",
        type=int,
        choices=ScannerConfig.EMA_PERIODS,
        default=ScannerConfig.DEFAULT_EMA_PERIOD,
        help="EMA period used by --filter.",
    )
    parser.add_argument("--page", type=int, default=1, help="Results page to show.")
    parser.add_argument(
        "--synthetic",
        action="store_true",
        default=settings.use_synthetic_history,
        help="Use generated price history instead of the NSE API.",
    )
    return parser.parse_args(argv)


def format_results_table(results: List[EmaScanResult], ema_period: int) -> str:
    """Render scan results as a text table."""
    if not results:
        return "No stocks match the current filters."

    rows = []
    for result in results:
        ema = result.ema(ema_period)
        rows.append({
            "Symbol": result.symbol,
            "Company": result.company_name,
            "Price": format_number(result.current_price),
            f"EMA {ema_period}": format_number(ema),
            "Distance": format_percent(percent_to_ema(result.current_price, ema)),
            "Position": result.relation(ema_period) or "N/A",
        })
    return pd.DataFrame(rows).to_string(index=False)


async def load_symbols(args: argparse.Namespace) -> List[SymbolInfo]:
    """Symbols to scan for the command line arguments."""
    if args.symbols:
        return [SymbolInfo(symbol=s.strip().upper()) for s in args.symbols.split(",") if s.strip()]

    preset = ScanPreset(args.preset)
    if args.synthetic:
        directory = [SymbolInfo(symbol=symbol) for symbol in NIFTY50_SYMBOLS]
        return resolve_preset(preset, directory)

    directory = await nse_client.get_all_symbols()
    gainers_losers = None
    if preset in (ScanPreset.GAINERS, ScanPreset.LOSERS):
        gainers_losers = await nse_client.get_gainers_losers()

    logger.info(f"Scanning: {PRESET_DESCRIPTIONS[preset]}")
    return resolve_preset(preset, directory, gainers_losers)


async def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)

    try:
        symbols = await load_symbols(args)
    except Exception as e:
        logger.error(f"Failed to load symbols to scan: {e}")
        return 1

    if not symbols:
        logger.warning("No symbols to scan")
        return 0

    provider = SyntheticHistoryProvider() if args.synthetic else nse_client
    scanner = EmaScanner(provider)
    results = await scanner.start_scan(symbols)

    # A single symbol gets the detailed EMA breakdown instead of a table
    if len(symbols) == 1 and len(results) == 1:
        print(get_ema_summary(results[0]))
        return 0

    filtered = filter_results(results, args.search, args.filter, args.ema)
    pages = total_pages(len(filtered), settings.results_per_page)
    page = clamp_page(args.page, len(filtered), settings.results_per_page)

    print(format_results_table(paginate(filtered, settings.results_per_page, page), args.ema))
    print(f"\nPage {page}/{pages} - {len(filtered)} of {len(results)} stocks "
          f"({len(scanner.skipped)} skipped)")
    return 0


def run() -> None:
    # Set up logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(), logging.FileHandler(settings.log_file)]
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
