from typing import List, Optional
import logging

from config.settings import ScannerConfig
from nse_scanner.data.models import EmaScanResult

logger = logging.getLogger(__name__)


def validate_data_sufficiency(series: List, required_days: int = 200, symbol: str = "") -> bool:
    """Check that a price history is long enough to seed an EMA of `required_days`.

    A short history is logged, naming the EMA periods that will stay undefined.
    """
    if not series:
        return False

    available = len(series)
    if available < required_days:
        undefined = [p for p in ScannerConfig.EMA_PERIODS if p > available]
        logger.warning(f"{symbol or 'series'}: {available} trading days available, "
                       f"{required_days} needed; EMA {undefined} undefined")
        return False

    return True


def percent_to_ema(price: float, ema: Optional[float]) -> Optional[float]:
    """Percentage distance from an EMA to the price."""
    if ema is None or ema == 0:
        return None
    return (price - ema) / ema * 100


def format_number(value: Optional[float]) -> str:
    if value is None or value != value:
        return "N/A"
    return f"{value:.2f}"


def format_percent(value: Optional[float]) -> str:
    if value is None or value != value:
        return "N/A"
    return f"{value:+.2f}%"


def get_ema_summary(result: EmaScanResult) -> str:
    """Generate a human-readable summary of a symbol's EMA position.

    Args:
        result: EMA scan result for the symbol

    Returns:
        Formatted summary string
    """
    title = result.symbol
    if result.company_name:
        title += f" ({result.company_name})"

    summary = f"EMA Summary for {title} - Current Price: ₹{result.current_price:.2f}\n\n"

    for period in ScannerConfig.EMA_PERIODS:
        value = result.ema(period)
        if value is not None:
            percent = format_percent(percent_to_ema(result.current_price, value))
            summary += f"• {period}-day EMA: ₹{value:.2f} "
            summary += f"(Price is {percent} {result.relation(period)})\n"
        else:
            summary += f"• {period}-day EMA: N/A (insufficient data)\n"

    return summary
