"""Environment-driven configuration"""

import logging
import os

logger = logging.getLogger(__name__)


def get_int_env(name: str, default: int) -> int:
    """Read an integer env var, falling back to default on missing or malformed values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Invalid integer for {name}={raw!r}, using default {default}")
        return default


def get_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


LOG_LEVEL = os.getenv('RGSTREAM_LOG_LEVEL', 'INFO').upper()
DEFAULT_CONTEXT_WIDTH = max(0, get_int_env('RGSTREAM_CONTEXT_WIDTH', 40))
CHUNK_SIZE = max(1, get_int_env('RGSTREAM_CHUNK_SIZE', 64 * 1024))
RG_PATH = os.getenv('RGSTREAM_RG_PATH') or None
PER_SPAN = get_bool_env('RGSTREAM_PER_SPAN')


def configure_logging(default_level: str = 'INFO') -> str:
    """Configure root logging once from RGSTREAM_LOG_LEVEL. Returns the level name used."""
    level_name = os.getenv('RGSTREAM_LOG_LEVEL', default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    return level_name


def get_constants() -> dict:
    return {
        'LOG_LEVEL': LOG_LEVEL,
        'DEFAULT_CONTEXT_WIDTH': DEFAULT_CONTEXT_WIDTH,
        'CHUNK_SIZE': CHUNK_SIZE,
        'RG_PATH': RG_PATH,
        'PER_SPAN': PER_SPAN,
    }


def get_app_env_variables() -> dict:
    return {key: value for key, value in os.environ.items() if key.startswith(('RGSTREAM_', 'UVICORN_'))}
