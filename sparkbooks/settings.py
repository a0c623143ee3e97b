from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SPARKBOOKS_", extra="ignore")

    db_url: str = "sqlite:///sparkbooks.db"

    log_level: str = "INFO"
    log_json: bool = False

    timezone: str = "UTC"
    currency_symbol: str = "$"

    default_tax_rate: Decimal = Decimal("0")
    estimate_validity_days: int = 30
    invoice_due_days: int = 30

    number_max_attempts: int = 5


settings = Settings()
