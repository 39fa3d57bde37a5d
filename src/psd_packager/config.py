"""
Runtime configuration read from the environment.
"""
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


# Base URL shared by the conversion (/upload) and font (/fonts) endpoints
API_BASE = os.getenv("PSD_PACKAGER_API_BASE", os.getenv("API_BASE", "http://localhost:5000")).rstrip("/")

UPLOAD_TIMEOUT_SEC = float(os.getenv("PSD_PACKAGER_UPLOAD_TIMEOUT", "120"))
FONTS_TIMEOUT_SEC = float(os.getenv("PSD_PACKAGER_FONTS_TIMEOUT", "60"))

SANITIZE_NAMES = _flag("PSD_PACKAGER_SANITIZE_NAMES", "false")
DISCARD_STALE_RESPONSES = _flag("PSD_PACKAGER_DISCARD_STALE", "true")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
