from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_NAME: str = "SettleUp Backend"

    # Seed the repository with sample users, categories and expenses
    USE_MOCK_DATA: bool = False

    # Balances below this magnitude count as settled
    SETTLEMENT_EPSILON: Decimal = Decimal("0.005")
    CURRENCY_SYMBOL: str = "$"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
