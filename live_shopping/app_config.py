from pydantic import BaseModel

from live_shopping.config import config


def _split_csv(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class AppEnvironConfig(BaseModel):
    # When enabled, the conferencing provider is stubbed and no network calls are made.
    DEMO_MODE: bool = config.get_bool("DEMO_MODE", default=False)
    DEBUG: bool = config.get_bool("DEBUG", default=False)

    API_HOST: str = (config.get("API_HOST") or "0.0.0.0").strip()
    API_PORT: int = int((config.get("API_PORT") or "").strip() or 8000)
    API_WORKERS: int = int((config.get("API_WORKERS") or "").strip() or 1)
    API_PREFIX: str = (config.get("API_PREFIX") or "/live-shopping").strip().rstrip("/")
    API_CORS_ORIGINS: list[str] = _split_csv(config.get("API_CORS_ORIGINS")) or [
        "http://localhost:3000"
    ]

    # Dyte configuration
    DYTE_BASE_URL: str = (config.get("DYTE_BASE_URL") or "https://api.dyte.io/v2").strip()
    DYTE_ORG_ID: str | None = (config.get("DYTE_ORG_ID") or "").strip() or None
    DYTE_API_KEY: str | None = (config.get("DYTE_API_KEY") or "").strip() or None
    DYTE_HTTP_TIMEOUT: float = float((config.get("DYTE_HTTP_TIMEOUT") or "").strip() or 30)
    DYTE_MEETING_REGION: str = (config.get("DYTE_MEETING_REGION") or "ap-south-1").strip()
    DYTE_CUSTOMER_PRESET: str = (
        config.get("DYTE_CUSTOMER_PRESET") or "group_call_participant"
    ).strip()
    DYTE_SUPPORT_PRESET: str = (config.get("DYTE_SUPPORT_PRESET") or "group_call_host").strip()
    DYTE_SUPPORT_DISPLAY_NAME: str = (
        config.get("DYTE_SUPPORT_DISPLAY_NAME") or "Customer Support"
    ).strip()

    # Postgres label holding the live_video_requests table
    POSTGRES_LABEL: str = (config.get("POSTGRES_LABEL") or "default").strip()

    LOGFIRE_ENABLE: bool = config.get_bool("LOGFIRE_ENABLE", default=False)
    LOGFIRE_TOKEN: str | None = (config.get("LOGFIRE_TOKEN") or "").strip() or None


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
