import os
import warnings
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_INSECURE_JWT_SECRET = "insecure-dev-secret-change-me"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _default_database_url() -> str:
    db_user = os.getenv("POSTGRES_USER", "postgres")
    db_password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db_host = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
    db_port = os.getenv("POSTGRES_PORT", "5432")
    db_name = os.getenv("POSTGRES_DB", "shopeasy")
    return f"postgresql+asyncpg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    sql_echo: bool = False
    jwt_secret_key: str = _INSECURE_JWT_SECRET
    access_token_expire_minutes: int = 60
    admin_emails: frozenset = field(default_factory=frozenset)
    checkout_rate_limit: str = "10/minute"
    observability_enabled: bool = True
    otlp_endpoint: str = "http://localhost:4317"

    @classmethod
    def from_env(cls) -> "Settings":
        jwt_secret = os.getenv("JWT_SECRET_KEY", "")
        if not jwt_secret:
            # Development still works, production misconfiguration stays visible.
            warnings.warn(
                "JWT_SECRET_KEY is not set. Using an insecure default. "
                "Set this env var in production!",
                stacklevel=2,
            )
            jwt_secret = _INSECURE_JWT_SECRET

        admin_emails = frozenset(
            email.strip().lower()
            for email in os.getenv("ADMIN_EMAILS", "").split(",")
            if email.strip()
        )

        return cls(
            database_url=os.getenv("DATABASE_URL") or _default_database_url(),
            sql_echo=_env_bool("SQL_ECHO", False),
            jwt_secret_key=jwt_secret,
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            admin_emails=admin_emails,
            checkout_rate_limit=os.getenv("CHECKOUT_RATE_LIMIT", "10/minute"),
            observability_enabled=_env_bool("OBSERVABILITY_ENABLED", True),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT", "http://localhost:4317"),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
