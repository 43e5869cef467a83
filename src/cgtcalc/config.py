from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CGT_", extra="ignore")

    bed_and_breakfast_days: int = 30
    coingecko_api_key: str = ""
    coingecko_rate_per_second: float = 1.0
    price_currencies: list[str] = ["BTC", "ETH", "USDC"]
    binance_api_key: str = ""
    binance_api_secret: str = ""
    binance_rate_per_second: float = 5.0
    http_timeout: float = 30.0
    log_level: str = "INFO"
