"""Settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .store import FirebaseStore, ServiceStore, YamlStore

# Default YAML store location (relative to project root)
DEFAULT_STORE_PATH = Path(__file__).parent.parent / "data" / "services.yaml"
DEFAULT_SHOP_NAME = "Subbaiah Multi Brand Auto"


@dataclass
class Settings:
    secret_key: str = "dev-secret-key-change-in-prod"
    store_url: Optional[str] = None
    store_auth: Optional[str] = None
    store_timeout: float = 10
    store_path: Path = DEFAULT_STORE_PATH
    shop_name: str = DEFAULT_SHOP_NAME
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            secret_key=env.get("SECRET_KEY", cls.secret_key),
            store_url=env.get("SERVICE_STORE_URL") or None,
            store_auth=env.get("SERVICE_STORE_AUTH") or None,
            store_timeout=float(env.get("SERVICE_STORE_TIMEOUT") or cls.store_timeout),
            store_path=Path(env.get("SERVICE_STORE_PATH") or DEFAULT_STORE_PATH),
            shop_name=env.get("SHOP_NAME", DEFAULT_SHOP_NAME),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_file=env.get("LOG_FILE") or None,
        )


def build_store(settings: Settings) -> ServiceStore:
    """Firebase when a database URL is configured, otherwise the local YAML file."""
    if settings.store_url:
        return FirebaseStore(
            settings.store_url,
            auth=settings.store_auth,
            timeout=settings.store_timeout,
        )
    return YamlStore(settings.store_path)
