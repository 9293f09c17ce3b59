import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

BACKENDS = ("json", "sqlite", "memory")


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    backend: str
    store_path: str
    db_path: str
    key_prefix: str

    log_level: str
    log_dir: str
    log_to_file: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_env()
    backend = os.getenv("COMPANYDIR_BACKEND", "json").strip().lower()
    if backend not in BACKENDS:
        raise RuntimeError(
            f"COMPANYDIR_BACKEND must be one of {', '.join(BACKENDS)}; got {backend!r}"
        )
    return Settings(
        backend=backend,
        store_path=os.getenv("COMPANYDIR_STORE_PATH", "data/store.json"),
        db_path=os.getenv("COMPANYDIR_DB_PATH", "data/companies.db"),
        key_prefix=os.getenv("COMPANYDIR_KEY_PREFIX", "rushWorking_"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("COMPANYDIR_LOG_DIR", "logs"),
        log_to_file=_flag("COMPANYDIR_LOG_FILE"),
    )
