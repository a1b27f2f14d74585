import os
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv

DEFAULT_API_URL = 'https://api.meaningcloud.com/sentiment-2.1'
DEFAULT_TIMEOUT_MS = 10_000
SNIPPET_CHARS = 200


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except (ValueError, TypeError):
        return default

def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, default))
    except (ValueError, TypeError):
        return default

def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    api_key: str
    api_url: str = DEFAULT_API_URL
    upstream_timeout_ms: int = DEFAULT_TIMEOUT_MS
    snippet_length: int = SNIPPET_CHARS
    enable_test_routes: bool = True
    port: int = 3000
    log_level: str = 'INFO'
    sample_rate: float = 1.0


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        api_key=os.getenv('MEANING_CLOUD_API_KEY', '').strip(),
        api_url=os.getenv('MEANING_CLOUD_API_URL', DEFAULT_API_URL),
        upstream_timeout_ms=_env_int('UPSTREAM_TIMEOUT_MS', DEFAULT_TIMEOUT_MS),
        snippet_length=_env_int('SNIPPET_LENGTH', SNIPPET_CHARS),
        enable_test_routes=_env_bool('ENABLE_TEST_ROUTES', True),
        port=_env_int('PORT', 3000),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        sample_rate=_env_float('SAMPLE_RATE', 1.0),
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once from the environment."""
    return load_settings()
