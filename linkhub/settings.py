from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    LOKI_ENABLED: bool = False
    LOKI_URL: str = "http://loki:3100"
    LOKI_VERSION: str = "1"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    # WebSocket settings
    WS_PATH: str = "/ws"
    WS_SEND_TIMEOUT_SECONDS: float = 2.0

    # Admission settings
    DENY_LIST_FILE: str = "denylist.local.txt"
    ALLOWED_USER_AGENTS: list[str] = [
        "CitizenFX",
        "Mozilla",
        "Chrome",
        "Safari",
        "Firefox",
    ]

    # Rate limiting settings (connection attempts per address)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX_ATTEMPTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: float = 60
    RATE_LIMIT_CLEANUP_INTERVAL_SECONDS: float = 300

    # Periodic "clients connected" log line
    STATS_LOG_INTERVAL_SECONDS: float = 30

    # Broadcast payload screening (case-insensitive regular expressions)
    PAYLOAD_DENY_PATTERNS: list[str] = [
        r"require\s*\(",
        r"process\s*\.",
        r"global\s*\.",
        r"__dirname",
        r"__filename",
        r"fs\s*\.",
        r"child_process",
    ]

    # HTTP control plane
    MAX_REQUEST_BODY_SIZE: int = 100_000


app_settings = Settings()
