import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple
import httpx
from config.settings import settings, ScannerConfig
from nse_scanner.data.models import GainersLosers, MarketMover, PricePoint, SymbolInfo


logger = logging.getLogger(__name__)

# Keys that may hold the list of historical records in a response object
HISTORY_KEYS = ["data", "candles", "records", "history"]


def normalize_number(value: Any) -> float:
    """Convert an NSE number (possibly a string with thousands separators) to float, 0 if invalid."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return 0.0


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(str(value).replace(",", ""))


def extract_history_records(payload: Any) -> List[Dict]:
    """Find the list of historical records in an NSE history response.

    The API answers with a list of per-range chunks ({"data": [...], "meta": ...}),
    a bare list of records, or an object holding the records under one of
    several keys.
    """
    if isinstance(payload, list):
        if payload and all(isinstance(chunk, dict) and isinstance(chunk.get("data"), list) for chunk in payload):
            return [record for chunk in payload for record in chunk["data"]]
        return [record for record in payload if isinstance(record, dict)]

    if isinstance(payload, dict):
        for key in HISTORY_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]

        arrays = [value for value in payload.values() if isinstance(value, list)]
        if arrays:
            largest = max(arrays, key=len)
            logger.info(f"Using largest array property with {len(largest)} items as historical data")
            return largest

        logger.warning(f"No historical records found in response with keys: {list(payload.keys())}")
        return []

    logger.warning(f"Unexpected historical data format: {type(payload).__name__}")
    return []


def parse_price_point(record: Dict) -> PricePoint:
    """Convert an NSE historical record into a PricePoint."""
    timestamp = record.get("CH_TIMESTAMP") or record.get("TIMESTAMP")
    if not timestamp:
        raise KeyError("CH_TIMESTAMP")

    volume = record.get("CH_TOT_TRADED_QTY")
    return PricePoint(
        date=str(timestamp)[:10],
        open=_optional_float(record.get("CH_OPENING_PRICE")),
        high=_optional_float(record.get("CH_TRADE_HIGH_PRICE")),
        low=_optional_float(record.get("CH_TRADE_LOW_PRICE")),
        close=float(str(record["CH_CLOSING_PRICE"]).replace(",", "")),
        volume=int(normalize_number(volume)) if volume is not None else None
    )


def date_chunks(start: date, end: date, chunk_days: int) -> List[Tuple[date, date]]:
    """Split [start, end] into consecutive windows of at most chunk_days days."""
    chunks = []
    chunk_start = start
    while chunk_start <= end:
        chunk_end = min(chunk_start + timedelta(days=chunk_days - 1), end)
        chunks.append((chunk_start, chunk_end))
        chunk_start = chunk_end + timedelta(days=1)
    return chunks


class NseClient:
    """Async client for the NSE India public API."""

    def __init__(self, base_url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.nse_base_url).rstrip("/")
        self.timeout = timeout or settings.nse_request_timeout
        self.transport = transport

        self.headers = {
            "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
                          "Chrome/120.0 Safari/537.36",
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": f"{self.base_url}/"
        }

    async def _make_request(self, endpoint: str, params: Dict = None) -> Any:
        """Make an async GET request to the NSE API.

        NSE only serves API requests that carry the cookies set by its home page,
        so the home page is fetched first within the same client session.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        async with httpx.AsyncClient(
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport
        ) as client:
            try:
                await client.get(f"{self.base_url}/")
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                if e.response.status_code == 401:
                    logger.error("NSE API authentication failed - API service may have changed")
                else:
                    logger.error(f"HTTP error {e.response.status_code}: {e.response.text}")
                raise
            except Exception as e:
                logger.error(f"Request to {url} failed: {str(e)}")
                raise

    async def get_all_symbols(self) -> List[SymbolInfo]:
        """Get all equity symbols traded on NSE."""
        data = await self._make_request("/api/market-data-pre-open", params={"key": "ALL"})

        rows = data.get("data") if isinstance(data, dict) else None
        if not rows:
            raise ValueError("No symbol data returned from NSE")

        symbols = set()
        for row in rows:
            metadata = row.get("metadata") or {}
            if metadata.get("symbol"):
                symbols.add(metadata["symbol"])

        logger.info(f"Successfully fetched {len(symbols)} symbols")
        return [SymbolInfo(symbol=symbol) for symbol in sorted(symbols)]

    async def get_gainers_losers(self, index: str = None) -> GainersLosers:
        """Get the top gainers and losers of an index."""
        index = index or ScannerConfig.DEFAULT_INDEX
        data = await self._make_request("/api/equity-stockIndices", params={"index": index})

        rows = data.get("data") if isinstance(data, dict) else None
        if not rows:
            raise ValueError(f"No data available from NSE API for index {index}")

        stocks = []
        for row in rows:
            # The first row summarizes the index itself
            if row.get("symbol") == index:
                continue
            try:
                stocks.append(MarketMover(
                    symbol=row["symbol"],
                    series=row.get("series") or "EQ",
                    ltp=normalize_number(row.get("lastPrice") or row.get("ltp")),
                    change=normalize_number(row.get("change")),
                    p_change=normalize_number(row.get("pChange")),
                    previous_close=normalize_number(row.get("previousClose")),
                    day_high=normalize_number(row.get("dayHigh") or row.get("high")),
                    day_low=normalize_number(row.get("dayLow") or row.get("low"))
                ))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse index row for {row.get('symbol', 'unknown')}: {e}")

        top = ScannerConfig.TOP_MOVERS_COUNT
        gainers = sorted((s for s in stocks if s.p_change > 0), key=lambda s: s.p_change, reverse=True)[:top]
        losers = sorted((s for s in stocks if s.p_change < 0), key=lambda s: s.p_change)[:top]

        return GainersLosers(gainers=gainers, losers=losers)

    async def get_historical_data(self, symbol: str, start: date, end: date) -> List[PricePoint]:
        """Get daily price history of an equity symbol.

        Returns an empty list when NSE has no data for the symbol or range.
        """
        records = []
        for chunk_start, chunk_end in date_chunks(start, end, settings.nse_history_chunk_days):
            params = {
                "symbol": symbol,
                "series": '["EQ"]',
                "from": chunk_start.strftime("%d-%m-%Y"),
                "to": chunk_end.strftime("%d-%m-%Y")
            }
            data = await self._make_request("/api/historical/cm/equity", params=params)
            records.extend(extract_history_records(data))

        price_points = []
        for record in records:
            try:
                price_points.append(parse_price_point(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse historical record for {symbol}: {e}")

        if not price_points:
            logger.info(f"No historical data available for {symbol}")

        return price_points


# Singleton instance for easy access
nse_client = NseClient()
