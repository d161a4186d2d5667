"""Filtering and pagination of EMA scan results."""

import math
from typing import List, Sequence

from config.settings import ScannerConfig, settings
from nse_scanner.data.models import EmaScanResult


def filter_results(
    results: Sequence[EmaScanResult],
    search_text: str = "",
    relation_filter: str = ScannerConfig.FILTER_ALL,
    ema_period: int = ScannerConfig.DEFAULT_EMA_PERIOD
) -> List[EmaScanResult]:
    """Filter scan results by search text and EMA relation.

    Args:
        results: Scan results
        search_text: Case-insensitive substring of the symbol or company name
        relation_filter: 'all', 'above' or 'below'
        ema_period: EMA period the relation filter applies to

    Returns:
        Results matching both the search text and the relation filter
    """
    if relation_filter not in ScannerConfig.RELATION_FILTERS:
        raise ValueError(f"Invalid relation filter: {relation_filter}. "
                         f"Valid options: {ScannerConfig.RELATION_FILTERS}")
    if ema_period not in ScannerConfig.EMA_PERIODS:
        raise ValueError(f"Invalid EMA period: {ema_period}. Valid options: {ScannerConfig.EMA_PERIODS}")

    search = (search_text or "").strip().lower()

    filtered = []
    for result in results:
        if search and search not in result.symbol.lower() and search not in result.company_name.lower():
            continue
        if relation_filter != ScannerConfig.FILTER_ALL and result.relation(ema_period) != relation_filter:
            continue
        filtered.append(result)

    return filtered


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, count: int, page_size: int) -> int:
    """Page number limited to [1, total_pages(count, page_size)]."""
    return min(max(page, 1), total_pages(count, page_size))


def paginate(results: Sequence[EmaScanResult], page_size: int = None, page: int = 1) -> List[EmaScanResult]:
    """Return one page of results.

    The page number is clamped to the available pages, so asking past the end
    returns the last page.
    """
    if page_size is None:
        page_size = settings.results_per_page

    page = clamp_page(page, len(results), page_size)
    start = (page - 1) * page_size
    return list(results[start:start + page_size])
