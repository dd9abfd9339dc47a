"""Configuration — loads environment variables with sensible defaults.

All tunables live here. Override via .env file or environment variables.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)

def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


# ═══════════════════════════════════════════════════════════════════════════
# LLM — Coach model
# ═══════════════════════════════════════════════════════════════════════════
# CHAT_PROVIDER tells the coach which backend to use:
#   "openai"    — OpenAI SDK (also works with DeepSeek, Ollama, Groq, etc.)
#   "anthropic" — Anthropic SDK
#   "gemini"    — Google Generative Language REST API

CHAT_PROVIDER = _env("CHAT_PROVIDER", "gemini")
CHAT_API_KEY = _env("CHAT_API_KEY")
CHAT_MODEL = _env("CHAT_MODEL", "gemini-1.5-flash-latest")
CHAT_BASE_URL = _env("CHAT_BASE_URL")    # optional custom endpoint
CHAT_TIMEOUT_SECONDS = _env_int("CHAT_TIMEOUT_SECONDS", 30)

# ═══════════════════════════════════════════════════════════════════════════
# Coach
# ═══════════════════════════════════════════════════════════════════════════

COACH_HISTORY_LIMIT = _env_int("COACH_HISTORY_LIMIT", 20)

# ═══════════════════════════════════════════════════════════════════════════
# Transport
# ═══════════════════════════════════════════════════════════════════════════

TELEGRAM_BOT_TOKEN = _env("TELEGRAM_BOT_TOKEN")

# ═══════════════════════════════════════════════════════════════════════════
# Owner
# ═══════════════════════════════════════════════════════════════════════════

OWNER_USER_ID = _env_int("OWNER_USER_ID", 0)


def set_owner_user_id(user_id: int) -> None:
    """Set OWNER_USER_ID at runtime and persist to .env for restart safety."""
    global OWNER_USER_ID
    OWNER_USER_ID = user_id
    _persist_owner(user_id)


def _persist_owner(user_id: int) -> None:
    """Write OWNER_USER_ID into .env so it survives restarts."""
    env_path = _PROJECT_ROOT / ".env"
    try:
        if env_path.exists():
            lines = env_path.read_text().splitlines()
            lines = [l for l in lines if not l.startswith("OWNER_USER_ID=")]
            lines.append(f"OWNER_USER_ID={user_id}")
            env_path.write_text("\n".join(lines) + "\n")
        else:
            env_path.write_text(f"OWNER_USER_ID={user_id}\n")
    except OSError:
        logging.getLogger(__name__).warning(
            "Could not persist OWNER_USER_ID to .env, set it manually"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Daily reminder (-1 = disabled)
# ═══════════════════════════════════════════════════════════════════════════

DAILY_REMINDER_HOUR = _env_int("DAILY_REMINDER_HOUR", -1)
DAILY_REMINDER_MINUTE = _env_int("DAILY_REMINDER_MINUTE", 0)

# ═══════════════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════════════

DB_PATH = Path(_env("HABITPAL_DB_PATH", str(_PROJECT_ROOT / "data" / "habitpal.db")))

# ═══════════════════════════════════════════════════════════════════════════
# Timezone (default UTC, override for your locale in .env)
# ═══════════════════════════════════════════════════════════════════════════
# Applied by callers before handing day keys to the engine, which itself
# always works in a single fixed calendar.

TIMEZONE_OFFSET_HOURS = _env_int("TIMEZONE_OFFSET_HOURS", 0)
