import os


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def _str_env(name: str, default: str) -> str:
    raw = str(os.getenv(name, default)).strip()
    return raw or default


API_PORT = _int_env("SECUREGUARD_API_PORT", 5000)
BIND_HOST = _str_env("SECUREGUARD_BIND_HOST", "127.0.0.1")
BASE_URL = _str_env("SECUREGUARD_BASE_URL", f"http://127.0.0.1:{API_PORT}")
API_PREFIX = "/api/security"

LOG_LEVEL = _str_env("SECUREGUARD_LOG_LEVEL", "INFO")
LOG_FILE = str(os.getenv("SECUREGUARD_LOG_FILE", "")).strip() or None

# "noop" keeps everything simulated; "script" hands changes to APPLY_SCRIPT
APPLIER = _str_env("SECUREGUARD_APPLIER", "noop").lower()
APPLY_SCRIPT = str(os.getenv("SECUREGUARD_APPLY_SCRIPT", "")).strip() or None

LOG_PAGE_SIZE = _int_env("SECUREGUARD_LOG_PAGE_SIZE", 50)
