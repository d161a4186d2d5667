"""Symbol lists for the scan presets."""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from config.nifty_symbols import NIFTY50_SYMBOLS
from nse_scanner.data.models import GainersLosers, MarketMover, SymbolInfo

logger = logging.getLogger(__name__)


class ScanPreset(str, Enum):
    NIFTY50 = "NIFTY50"
    NIFTY100 = "NIFTY100"
    NIFTY200 = "NIFTY200"
    GAINERS = "GAINERS"
    LOSERS = "LOSERS"
    CUSTOM = "CUSTOM"


PRESET_DESCRIPTIONS = {
    ScanPreset.NIFTY50: "NIFTY 50 stocks",
    ScanPreset.NIFTY100: "NIFTY 100 stocks",
    ScanPreset.NIFTY200: "NIFTY 200 stocks",
    ScanPreset.GAINERS: "Today's top gainers",
    ScanPreset.LOSERS: "Today's top losers",
    ScanPreset.CUSTOM: "Custom selection",
}


def _movers_to_symbols(movers: List[MarketMover], directory: Sequence[SymbolInfo]) -> List[SymbolInfo]:
    names = {info.symbol: info.company_name for info in directory}
    return [
        SymbolInfo(symbol=mover.symbol, company_name=names.get(mover.symbol) or mover.symbol)
        for mover in movers
    ]


def resolve_preset(
    preset: ScanPreset,
    directory: Sequence[SymbolInfo],
    gainers_losers: Optional[GainersLosers] = None
) -> List[SymbolInfo]:
    """Get the symbols to scan for a preset.

    Args:
        preset: Scan preset
        directory: All known symbols, in directory order
        gainers_losers: Today's movers, required for the GAINERS and LOSERS presets

    Returns:
        Symbols to scan
    """
    preset = ScanPreset(preset)

    if preset == ScanPreset.NIFTY50:
        return [info for info in directory if info.symbol in NIFTY50_SYMBOLS]
    if preset == ScanPreset.NIFTY100:
        return list(directory[:100])
    if preset == ScanPreset.NIFTY200:
        return list(directory[:200])
    if preset in (ScanPreset.GAINERS, ScanPreset.LOSERS):
        if gainers_losers is None:
            logger.warning(f"No gainers/losers data available for preset {preset.value}")
            return []
        movers = gainers_losers.gainers if preset == ScanPreset.GAINERS else gainers_losers.losers
        return _movers_to_symbols(movers, directory)
    return list(directory)
