# config.py - settings read from the environment (and .env)

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Placeholder the item proxy treats as "no upstream configured"
UNCONFIGURED_API_URL = "https://your-api-gateway-url.execute-api.amazonaws.com/prod"


def _flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    port: int = 3000
    environment: str = "development"
    database_path: str = "data/swarmboard.db"
    static_dir: str = "dist"
    poll_interval_ms: int = 5000
    log_level: str = "INFO"

    items_enabled: bool = True
    items_path: str = "/items"
    api_gateway_url: str = ""
    api_gateway_param: str = ""

    secrets_enabled: bool = False
    aws_region: str = "eu-west-1"
    ssm_prefix: str = "/swarmboard"

    db_host: str = "localhost"
    db_user: str = "app_user"
    db_name: str = "app_database"
    db_port: int = 3306

    # Filled by the secrets stage, never read from the environment
    secrets: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls, dotenv=True):
        if dotenv:
            load_dotenv()
        return cls(
            port=_int("PORT", 3000),
            environment=os.getenv("NODE_ENV") or os.getenv("FLASK_ENV") or "development",
            database_path=os.getenv("DATABASE_PATH", "data/swarmboard.db"),
            static_dir=os.getenv("STATIC_DIR", "dist"),
            poll_interval_ms=_int("POLL_INTERVAL_MS", 5000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            items_enabled=_flag("ITEMS_ENABLED", True),
            items_path=os.getenv("ITEMS_PATH", "/items"),
            api_gateway_url=os.getenv("API_GATEWAY_URL", ""),
            api_gateway_param=os.getenv("API_GATEWAY_PARAM", ""),
            secrets_enabled=_flag("SECRETS_ENABLED", False),
            aws_region=os.getenv("AWS_REGION", "eu-west-1"),
            ssm_prefix=os.getenv("SSM_PREFIX", "/swarmboard").rstrip("/"),
            db_host=os.getenv("DB_HOST", "localhost"),
            db_user=os.getenv("DB_USER", "app_user"),
            db_name=os.getenv("DB_NAME", "app_database"),
            db_port=_int("DB_PORT", 3306),
        )

    @property
    def database_uri(self):
        if self.database_path == ":memory:":
            return "sqlite://"
        return "sqlite:///" + os.path.abspath(self.database_path)

    @property
    def is_production(self):
        return self.environment == "production"
