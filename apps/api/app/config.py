import os


def get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None and value != "" else default


def get_env_bool(name: str, default: bool) -> bool:
    raw_default = "1" if default else "0"
    raw = get_env(name, raw_default).strip().lower()
    return raw in {"1", "true", "yes", "y", "on"}


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = get_env(name, str(default)).strip()
    try:
        parsed = int(raw)
    except (TypeError, ValueError):
        parsed = int(default)
    if min_value is not None and parsed < min_value:
        parsed = min_value
    return parsed


APP_NAME = get_env("APP_NAME", "Land Funnel API")
LAND_OUTPUT_DIR = get_env("LAND_OUTPUT_DIR", "data/reports")
ALL_OWNERS_MAX_LENGTH = get_env_int("ALL_OWNERS_MAX_LENGTH", 250, min_value=10)
CRM_PLACEHOLDER_LAST_NAME = get_env("CRM_PLACEHOLDER_LAST_NAME", "Pending Owner")
MAX_UPLOAD_MB = get_env_int("MAX_UPLOAD_MB", 50, min_value=1)
CORS_ALLOW_ALL = get_env_bool("CORS_ALLOW_ALL", True)
