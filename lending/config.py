from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Decision cache (LRU bound, entries are amortization tables)
    decision_cache_size: int = 1024

    # Fallbacks when an approval decision omits a term
    default_rate_apr: Decimal = Decimal("12")
    default_tenure_months: int = 12

    # App
    log_level: str = "INFO"


settings = Settings()
