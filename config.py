"""
Central configuration for the storyboard service.
All production values come from environment variables with sensible defaults.
"""

import os


def _env_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key, "").lower()
    if val in ("true", "1", "yes"):
        return True
    if val in ("false", "0", "no"):
        return False
    return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Shot director agent (remote LLM)
# ---------------------------------------------------------------------------
# Read lazily so tests and .env reloads can flip the agent on and off.
def get_shot_director_settings() -> dict:
    """Connection settings for the remote shot director agent."""
    return {
        "enabled": _env_bool("KIMI_ENABLED", False),
        "api_base": os.getenv("KIMI_API_BASE", ""),
        "api_key": os.getenv("KIMI_API_KEY", ""),
        "agent_id": os.getenv("KIMI_SHOT_DIRECTOR_AGENT_ID", "shot_director"),
        "timeout": _env_float("KIMI_TIMEOUT_SEC", 60.0),
    }


# ---------------------------------------------------------------------------
# Sketch generation (image API)
# ---------------------------------------------------------------------------
def get_sketch_settings() -> dict:
    """Settings for storyboard sketch generation."""
    return {
        "api_key": os.getenv("OPENAI_API_KEY", ""),
        "api_base": os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1"),
        "model": os.getenv("SKETCH_MODEL", "dall-e-3"),
        "size": os.getenv("SKETCH_SIZE", "1024x1024"),
        "quality": os.getenv("SKETCH_QUALITY", "standard"),
        "style": os.getenv("SKETCH_STYLE", "pencil sketch"),
        "delay": _env_float("SKETCH_DELAY_SEC", 0.5),
        "timeout": _env_float("SKETCH_TIMEOUT_SEC", 120.0),
    }


# ---------------------------------------------------------------------------
# Redis cache
# ---------------------------------------------------------------------------
REDIS_URL = os.getenv("REDIS_URL")
SHOTLIST_CACHE_TTL_SEC = _env_int("SHOTLIST_CACHE_TTL_SEC", 3600)
SHOTLIST_CACHE_PREFIX = os.getenv("SHOTLIST_CACHE_PREFIX", "storyboard:shotlist")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
