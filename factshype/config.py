"""Configuration settings for the facts.hype backend."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_key: str = ""

    # Chain
    rpc_url: str = "https://rpc.hyperliquid-testnet.xyz/evm"
    chain_id: int = 998
    facts_contract_address: str = "0x25C8Cc18bA28310087729a355FF884e4058f08f9"

    # Snapshot freshness window for chain reads
    snapshot_ttl_seconds: int = 15
    # How long, and for how many keys, last known snapshots are kept
    snapshot_max_age_seconds: int = 600
    snapshot_cache_size: int = 1024

    # Listing
    max_page_size: int = 50

    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
