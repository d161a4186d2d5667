from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings and configuration."""

    # NSE API Configuration
    nse_base_url: str = Field(default="https://www.nseindia.com")
    nse_request_timeout: float = Field(default=30.0)
    nse_history_chunk_days: int = Field(default=90)

    # Scanner Configuration
    scan_batch_size: int = Field(default=10)
    scan_cache_ttl_minutes: int = Field(default=15)
    scan_lookback_days: int = Field(default=365)
    results_per_page: int = Field(default=15)
    use_synthetic_history: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="nse_scanner.log")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Global settings instance
settings = Settings()


# Scanner-specific configurations
class ScannerConfig:
    """Scanner-specific configuration constants."""

    # EMA periods computed for every symbol
    EMA_PERIODS: List[int] = [10, 20, 50, 200]
    DEFAULT_EMA_PERIOD = 50

    # Relation filters
    FILTER_ALL = "all"
    FILTER_ABOVE = "above"
    FILTER_BELOW = "below"

    RELATION_FILTERS = [
        FILTER_ALL,
        FILTER_ABOVE,
        FILTER_BELOW
    ]

    # Gainers/losers listing
    DEFAULT_INDEX = "NIFTY 50"
    TOP_MOVERS_COUNT = 10
