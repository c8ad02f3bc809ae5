from pydantic import BaseModel

from room_publisher.shared.config import config


def _optional(key: str) -> str | None:
    return (config.get(key) or "").strip() or None


def _flag(key: str, default: str = "false") -> bool:
    return (config.get(key) or default).strip().lower() == "true"


class AppEnvironConfig(BaseModel):
    # LiveKit session fallbacks, used only when the matching CLI flag is absent
    LIVEKIT_URL: str | None = None
    LIVEKIT_TOKEN: str | None = None

    DEBUG: bool = False

    # Logfire export of loguru records (optional)
    LOGFIRE_ENABLE: bool = False
    LOGFIRE_TOKEN: str | None = None

    @classmethod
    def from_environ(cls) -> "AppEnvironConfig":
        return cls(
            LIVEKIT_URL=_optional("LIVEKIT_URL"),
            LIVEKIT_TOKEN=_optional("LIVEKIT_TOKEN"),
            DEBUG=_flag("DEBUG"),
            LOGFIRE_ENABLE=_flag("LOGFIRE_ENABLE"),
            LOGFIRE_TOKEN=_optional("LOGFIRE_TOKEN"),
        )


_app_environ_config: AppEnvironConfig | None = None


def get_app_environ_config() -> AppEnvironConfig:
    global _app_environ_config
    if _app_environ_config is None:
        _app_environ_config = AppEnvironConfig.from_environ()
    return _app_environ_config


def reset_app_environ_config() -> None:
    """Drop the cached config and re-read env files and the process environment."""
    global _app_environ_config
    config.reload()
    _app_environ_config = None
