import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    env: str = "dev"

    # Stripe
    stripe_secret_key: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    stripe_consultation_only: bool = False

    # Go High Level (LeadConnector)
    ghl_api_key: str = ""
    ghl_location_id: str = ""
    ghl_calendar_id: str = ""
    ghl_api_base: str = "https://services.leadconnectorhq.com"
    ghl_api_version: str = "2021-04-15"

    # Source fetching
    source_page_size: int = 100
    http_timeout_seconds: float = 10.0

    # CORS
    cors_allowed_origins: str = "*"

    # Reviewing client
    api_base_url: str = "http://localhost:8080"
    approvals_path: str = "consultant_invoice_approvals.json"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def ghl_configured(self) -> bool:
        return bool(self.ghl_api_key and self.ghl_location_id)

    model_config = {"env_prefix": "", "case_sensitive": False}

    @model_validator(mode="after")
    def _validate_required_in_production(self) -> "Settings":
        if self.env in ("staging", "prod") and not self.stripe_secret_key:
            raise ValueError(f"STRIPE_SECRET_KEY is required in {self.env} environment")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
