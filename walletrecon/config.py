"""Configuration from environment variables."""

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Redis (session storage)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    # Column discovery
    header_scan_rows: int = 10

    # Sell-rate tolerances
    amount_tolerance: Decimal = Decimal("0.01")
    rate_tolerance: Decimal = Decimal("0.001")

    # How the per-wallet match type is chosen when several candidates match
    # "last": the last matching candidate wins
    # "precedence": sell_rate > tp2p > exact
    match_type_policy: Literal["last", "precedence"] = "last"

    # Uploads and sessions
    max_upload_bytes: int = 20 * 1024 * 1024
    session_ttl_seconds: int = 3600

    # Display labels
    source_label: str = "Bank Sheet"
    wallet1_label: str = "Wallet 1"
    wallet2_label: str = "Wallet 2"

    log_level: str = "INFO"

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()


# Upload slots - slot name -> display label
SLOTS = {
    "source": settings.source_label,
    "wallet1": settings.wallet1_label,
    "wallet2": settings.wallet2_label,
}
