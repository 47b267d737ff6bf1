import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

URL_PLACEHOLDER = "your_actual_supabase_project_url_here"
KEY_PLACEHOLDER = "your_actual_supabase_anon_key_here"

CONFIG_ERROR = "Supabase is not properly configured. Please set SUPABASE_URL and SUPABASE_KEY in your .env file."

DEFAULT_COLLECTORS = ("Kalpesh", "Sanjay", "Supan", "Vipul")
BANNER_TIMEOUT_SECONDS = 3.0

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class StoreConfig:
    url: str
    key: str


@dataclass(frozen=True)
class AppSettings:
    collectors: Tuple[str, ...] = DEFAULT_COLLECTORS
    currency: str = "Rs."
    banner_timeout: float = BANNER_TIMEOUT_SECONDS
    company: str = "CashFlow"


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    if environ is None:
        load_dotenv()
        return os.environ
    return environ


def load_store_config(environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """Read the store URL and access key. With no mapping given, `.env` is loaded into os.environ first."""
    env = _environ(environ)
    return StoreConfig(
        url=(env.get("SUPABASE_URL") or "").strip(),
        key=(env.get("SUPABASE_KEY") or "").strip(),
    )


def config_error(config: StoreConfig) -> Optional[str]:
    """Message to show when the store cannot be used, None when it can."""
    if not config.url or config.url == URL_PLACEHOLDER:
        return CONFIG_ERROR
    if not config.key or config.key == KEY_PLACEHOLDER:
        return CONFIG_ERROR
    return None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    env = _environ(environ)
    raw = env.get("CASHBOOK_COLLECTORS", "")
    collectors = tuple(c.strip() for c in raw.split(",") if c.strip()) or DEFAULT_COLLECTORS
    return AppSettings(collectors=collectors)


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
