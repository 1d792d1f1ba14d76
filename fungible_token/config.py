"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


# 0.00125 of the host's base unit (10^24 smallest units)
DEFAULT_MIN_STORAGE_BALANCE = "1250000000000000000000"

DEFAULT_ICON = (
    "data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 288 288'%3E"
    "%3Cg id='l' data-name='l'%3E%3Cpath d='M187.58,79.81l-30.1,44.69a3.2,3.2,0,0,0,4.75,4.2L191.86,103"
    "a1.2,1.2,0,0,1,2,.91v80.46a1.2,1.2,0,0,1-2.12.77L102.18,77.93A15.35,15.35,0,0,0,90.47,72.5H87.34"
    "A15.34,15.34,0,0,0,72,87.84V201.16A15.34,15.34,0,0,0,87.34,216.5h0a15.35,15.35,0,0,0,13.08-7.31"
    "l30.1-44.69a3.2,3.2,0,0,0-4.75-4.2L96.14,186a1.2,1.2,0,0,1-2-.91V104.61a1.2,1.2,0,0,1,2.12-.77"
    "l89.55,107.23a15.35,15.35,0,0,0,11.71,5.43h3.13A15.34,15.34,0,0,0,216,201.16V87.84"
    "A15.34,15.34,0,0,0,200.66,72.5h0A15.35,15.35,0,0,0,187.58,79.81Z'/%3E%3C/g%3E%3C/svg%3E"
)


class TokenConfig(BaseSettings):
    """Fungible token ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="FT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    database_path: str = "fungible_token.db"

    # Event notification
    event_sink: str = "log"  # log or memory
    event_standard: str = "nep141"
    event_version: str = "1.0.0"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Token metadata (fixed at construction)
    token_spec: str = "ft-1.0.0"
    token_name: str = "TDJS"
    token_symbol: str = "TTTTTTDJS"
    token_decimals: int = 18
    token_icon: Optional[str] = DEFAULT_ICON
    token_reference: Optional[str] = "https://rferenceexample.com"
    token_reference_hash: Optional[str] = "https://rferenceexample.com"

    # Registration threshold, decimal string
    min_storage_balance: str = DEFAULT_MIN_STORAGE_BALANCE

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090


# Global configuration instance
config = TokenConfig()


def get_config() -> TokenConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> TokenConfig:
    """Reload configuration from environment"""
    global config
    config = TokenConfig()
    return config
