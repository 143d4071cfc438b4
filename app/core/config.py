from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env.local",
        extra="ignore"
    )

#  Database credentials
    POSTGRES_DB_URL: str | None = None
    REDIS_HOST: str | None = None


#  Mercado Pago credentials
    MERCADOPAGO_BASE_URL: str = "https://api.mercadopago.com"
    MERCADOPAGO_ACCESS_TOKEN: str
    MERCADOPAGO_NOTIFICATION_URL: str

    MERCADOPAGO_COLLECTOR_ID: str
    MERCADOPAGO_POS_ID: str
    MERCADOPAGO_ITEM_CATEGORY: str = "Lanches"
    MERCADOPAGO_CURRENCY: str = "BRL"

#  Order service
    ORDER_SERVICE_URL: str = "http://localhost:3000"


#  Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0

#  Webhook handling
    WEBHOOK_FAILURE_POLICY: Literal["log", "escalate"] = "log"
    WEBHOOK_DEDUP_TTL_SECONDS: int = 0


    APP_NAME: str = "MERCADOPAGO GATEWAY"
    DEBUG_MODE: bool = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
