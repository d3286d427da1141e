"""Central environment-driven settings for the payment service.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`); factories also accept an explicit `Settings`
instance so tests can build isolated apps.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "orderpay"
    log_level: str = "INFO"
    database_dsn: str = "sqlite:///./orderpay.db"
    gateway_name: str = "stripe"
    gateway_currencies: str = "USD,EUR,GBP,CAD,AUD"
    gateway_decline_rate: float = 0.0
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def supported_currencies(self) -> frozenset[str]:
        return frozenset(code.strip().upper() for code in self.gateway_currencies.split(",") if code.strip())


settings = Settings()
