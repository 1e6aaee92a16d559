"""Application configuration via Pydantic BaseSettings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings for environment-driven configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Retell (voice agent provider)
    retell_api_key: str | None = None
    retell_agent_id: str | None = None
    retell_api_base: str = "https://api.retellai.com"
    retell_sip_domain: str = "sip.usw2.vocode.retellai.com"

    # Plivo (carrier)
    plivo_auth_id: str | None = None
    plivo_auth_token: str | None = None
    plivo_api_base: str = "https://api.plivo.com"

    # Public origin used to build webhook URLs; falls back to the request host
    server_url: str | None = None
    default_from_number: str | None = None

    ring_timeout: int = 30
    dial_time_limit: int = 3600

    host: str = "0.0.0.0"
    port: int = 3000
    log_dir: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()
