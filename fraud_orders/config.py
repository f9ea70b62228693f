"""
Application configuration using pydantic-settings.
Operator-editable values (the blacklists, flags, rejection message) live in the
options store; this module only holds deployment-level settings.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_env: str = "development"
    log_level: str = "INFO"

    # Database (options table + blocked attempt log table)
    database_url: str = "sqlite+aiosqlite:///./fraud_orders.db"

    # Debug log file sink
    log_dir: str = "./wmfo-logs"
    debug_log_filename: str = "wmfo-debug.log"
    debug_log_max_bytes: int = 5 * 1024 * 1024
    debug_log_backup_count: int = 5

    # Customer-facing text
    default_blacklist_message: str = "Sorry, You are being restricted from placing orders."
    blacklisted_order_note: str = "Order details blacklisted for future checkout."
    remove_blacklisted_order_note: str = "Order details removed from blacklist."

    # Fraud attempt tracking
    default_allowed_fraud_attempts: int = 5

    # Query parameter the eWAY gateway appends when returning to the pay page
    payment_callback_param: str = "AccessCode"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "WMFO_"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
