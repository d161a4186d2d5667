"""
EMA scan orchestration.

Drives a list of symbols through batched historical data retrieval and EMA
calculation. Batches run one after another; the symbols of a batch are
fetched concurrently, so at most `batch_size` requests are in flight.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Set, Union

from config.settings import ScannerConfig, settings
from nse_scanner.analyzers.ema import build_scan_result
from nse_scanner.analyzers.utils import validate_data_sufficiency
from nse_scanner.data.models import EmaScanResult, PricePoint, ScanOutcome, ScanProgress, SymbolInfo
from nse_scanner.scanner.cache import ScanCache

logger = logging.getLogger(__name__)


class HistoryProvider(Protocol):
    """Source of daily price history."""

    async def get_historical_data(self, symbol: str, start: date, end: date) -> List[PricePoint]:
        ...


class EmaScanner:
    """Runs EMA scans over a symbol list and accumulates the results."""

    def __init__(
        self,
        history_provider: HistoryProvider,
        cache: ScanCache = None,
        batch_size: int = None,
        lookback_days: int = None,
        on_result: Optional[Callable[[EmaScanResult], None]] = None,
        on_progress: Optional[Callable[[ScanProgress], None]] = None,
        today: Callable[[], date] = date.today
    ):
        batch_size = settings.scan_batch_size if batch_size is None else batch_size
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        self.history_provider = history_provider
        self.cache = cache if cache is not None else ScanCache()
        self.batch_size = batch_size
        self.lookback_days = settings.scan_lookback_days if lookback_days is None else lookback_days
        self.on_result = on_result
        self.on_progress = on_progress
        self._today = today

        self._scanning = False
        self._progress = ScanProgress()
        self._results: List[EmaScanResult] = []
        self._emitted: Set[str] = set()
        self._outcomes: List[ScanOutcome] = []
        self._lookups: Dict[str, asyncio.Future] = {}

    @property
    def is_scanning(self) -> bool:
        return self._scanning

    @property
    def progress(self) -> ScanProgress:
        return self._progress.model_copy()

    @property
    def results(self) -> List[EmaScanResult]:
        """Results of the current (or last) scan in emission order."""
        return list(self._results)

    @property
    def outcomes(self) -> List[ScanOutcome]:
        return list(self._outcomes)

    @property
    def skipped(self) -> Dict[str, str]:
        """Symbols skipped by the last scan, mapped to the reason."""
        return {o.symbol: o.reason for o in self._outcomes if not o.is_ok}

    async def start_scan(self, symbols: Sequence[Union[SymbolInfo, str]]) -> List[EmaScanResult]:
        """Scan the given symbols.

        Does nothing if a scan is already running or there are no symbols.
        Failures of individual symbols are logged and skipped.

        Returns:
            The results emitted by the scan
        """
        if self._scanning:
            logger.warning("Scan already in progress, ignoring new scan request")
            return self.results

        if not symbols:
            logger.info("No symbols to scan")
            return self.results

        symbol_infos = [SymbolInfo(symbol=s) if isinstance(s, str) else s for s in symbols]

        self._scanning = True
        self._progress = ScanProgress(completed=0, total=len(symbol_infos))
        self._results = []
        self._emitted = set()
        self._outcomes = []
        self._lookups = {}

        end_date = self._today()
        start_date = end_date - timedelta(days=self.lookback_days)

        logger.info(f"Starting EMA scan of {len(symbol_infos)} symbols "
                    f"({start_date} to {end_date}, batch size {self.batch_size})")

        try:
            for i in range(0, len(symbol_infos), self.batch_size):
                batch = symbol_infos[i:i + self.batch_size]
                await asyncio.gather(*(
                    self._process_symbol(info, start_date, end_date) for info in batch
                ))
                logger.info(f"Progress: {self._progress.completed}/{self._progress.total} symbols processed "
                            f"({len(self._results)} results)")
        finally:
            self._scanning = False
            self._lookups = {}

        skipped = len(self._outcomes) - sum(1 for o in self._outcomes if o.is_ok)
        logger.info(f"EMA scan completed. {len(self._results)} results, {skipped} skipped.")
        return self.results

    async def _process_symbol(self, info: SymbolInfo, start_date: date, end_date: date) -> ScanOutcome:
        # Repeated symbols share one lookup per scan, so each is fetched and cached once
        lookup = self._lookups.get(info.symbol)
        if lookup is None:
            lookup = asyncio.ensure_future(self._lookup(info, start_date, end_date))
            self._lookups[info.symbol] = lookup
        else:
            logger.debug(f"{info.symbol}: repeated in symbol list, reusing lookup")
        outcome = await lookup

        if outcome.is_ok:
            self._emit(outcome.result)

        self._outcomes.append(outcome)
        self._progress.completed += 1
        self._notify(self.on_progress, self.progress)
        return outcome

    async def _lookup(self, info: SymbolInfo, start_date: date, end_date: date) -> ScanOutcome:
        symbol = info.symbol
        try:
            cached = self.cache.get(symbol)
            if cached is not None:
                outcome = ScanOutcome.ok(cached)
            else:
                outcome = await self._scan_symbol(info, start_date, end_date)
        except Exception as e:
            logger.error(f"Error scanning {symbol}: {e}")
            outcome = ScanOutcome.skipped(symbol, str(e) or type(e).__name__)

        if not outcome.is_ok:
            logger.warning(f"{symbol}: skipped ({outcome.reason})")
        return outcome

    async def _scan_symbol(self, info: SymbolInfo, start_date: date, end_date: date) -> ScanOutcome:
        series = await self.history_provider.get_historical_data(info.symbol, start_date, end_date)
        if not series:
            return ScanOutcome.skipped(info.symbol, "no historical data")

        # Short histories still scan; the longer EMAs stay undefined
        validate_data_sufficiency(series, max(ScannerConfig.EMA_PERIODS), symbol=info.symbol)

        result = build_scan_result(info.symbol, info.company_name, series)
        self.cache.put(info.symbol, result)
        return ScanOutcome.ok(result)

    def _emit(self, result: EmaScanResult) -> None:
        if result.symbol in self._emitted:
            return
        self._emitted.add(result.symbol)
        self._results.append(result)
        self._notify(self.on_result, result)

    def _notify(self, callback: Optional[Callable], payload) -> None:
        if callback is None:
            return
        try:
            callback(payload)
        except Exception as e:
            logger.error(f"Scan listener failed: {e}")
