"""Server configuration for the AWV API.

Settings come from ``SERVER_*`` environment variables (plus
``TRUSTED_PROXY_SECRET``); blank values fall back to the defaults below,
which suit local development.
"""

import os
from dataclasses import dataclass, field

# Pagination bounds for GET /visits.  Read at import time because Query()
# defaults are fixed when the route is declared.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name, "").strip()
    return value or default


@dataclass(frozen=True)
class ServerSettings:
    """Immutable settings for one server process."""

    host: str = "0.0.0.0"
    port: int = 8080

    # Allowed CORS origins; ["*"] during development
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Directory of template YAML; None uses TemplateStore's default lookup
    template_dir: str | None = None

    log_level: str = "INFO"

    # Shared secret proving X-User-ID was set by the API gateway
    trusted_proxy_secret: str | None = None


def load_settings() -> ServerSettings:
    """Read :class:`ServerSettings` from the environment."""
    origins = [o.strip() for o in _env("SERVER_CORS_ORIGINS", "*").split(",")]
    return ServerSettings(
        host=_env("SERVER_HOST", "0.0.0.0"),
        port=int(_env("SERVER_PORT", "8080")),
        cors_origins=[o for o in origins if o],
        template_dir=_env("SERVER_TEMPLATE_DIR"),
        log_level=_env("SERVER_LOG_LEVEL", "INFO").upper(),
        trusted_proxy_secret=_env("TRUSTED_PROXY_SECRET"),
    )
