from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict


EmaRelation = Literal["above", "below"]


# Core market data models
class PricePoint(BaseModel):
    """One trading day of OHLC + Volume data."""
    model_config = ConfigDict(allow_inf_nan=False)

    date: str
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: float
    volume: Optional[int] = None

    def price(self, field: str = "close") -> float:
        """Value of the requested price field, falling back to close."""
        value = getattr(self, field, None)
        if value is None:
            return self.close
        return float(value)


class SymbolInfo(BaseModel):
    """Symbol directory entry."""
    symbol: str
    company_name: str = ""


class MarketMover(BaseModel):
    """Index constituent row used for gainers/losers listings."""
    symbol: str
    series: str = "EQ"
    ltp: float
    change: float
    p_change: float
    previous_close: float
    day_high: float
    day_low: float


class GainersLosers(BaseModel):
    """Top gainers and losers of an index."""
    gainers: List[MarketMover] = []
    losers: List[MarketMover] = []


class EmaScanResult(BaseModel):
    """EMA snapshot of a single symbol."""
    model_config = ConfigDict(frozen=True)

    symbol: str
    company_name: str
    current_price: float

    ema_10: Optional[float] = None
    ema_20: Optional[float] = None
    ema_50: Optional[float] = None
    ema_200: Optional[float] = None

    relation_to_ema_10: Optional[EmaRelation] = None
    relation_to_ema_20: Optional[EmaRelation] = None
    relation_to_ema_50: Optional[EmaRelation] = None
    relation_to_ema_200: Optional[EmaRelation] = None

    def ema(self, period: int) -> Optional[float]:
        return getattr(self, f"ema_{period}")

    def relation(self, period: int) -> Optional[EmaRelation]:
        return getattr(self, f"relation_to_ema_{period}")


class ScanCacheEntry(BaseModel):
    """Cached scan result with its creation time."""
    result: EmaScanResult
    timestamp: float


class ScanProgress(BaseModel):
    """Progress of the running (or last) scan."""
    completed: int = 0
    total: int = 0

    @property
    def is_complete(self) -> bool:
        return self.completed >= self.total

    @property
    def percent(self) -> float:
        if not self.total:
            return 0.0
        return self.completed / self.total * 100


class ScanOutcome(BaseModel):
    """Per-symbol outcome of a scan: either a result or the reason it was skipped."""
    symbol: str
    status: Literal["ok", "skipped"]
    result: Optional[EmaScanResult] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, result: EmaScanResult) -> "ScanOutcome":
        return cls(symbol=result.symbol, status="ok", result=result)

    @classmethod
    def skipped(cls, symbol: str, reason: str) -> "ScanOutcome":
        return cls(symbol=symbol, status="skipped", reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"
