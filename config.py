"""
Configuration - Environment-driven settings for ClassPilot
"""

import os
from dotenv import load_dotenv

load_dotenv()

def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

# --- Model provider ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
LLM_MODEL_NAME = os.getenv("LLM_MODEL_NAME", "gpt-4o-mini")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
LLM_STREAMING = _env_flag("LLM_STREAMING", "true")

# --- Generation parameters ---
LESSON_MAX_TOKENS = int(os.getenv("LESSON_MAX_TOKENS", "2000"))
MODULE_METADATA_MAX_TOKENS = int(os.getenv("MODULE_METADATA_MAX_TOKENS", "500"))
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.7"))

# --- Authoring session ---
MODULE_NAME_DEBOUNCE_SECONDS = float(os.getenv("MODULE_NAME_DEBOUNCE_SECONDS", "1.0"))
MIN_MODULE_NAME_LENGTH = int(os.getenv("MIN_MODULE_NAME_LENGTH", "3"))

# --- Servers ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5001"))
WEBSOCKET_HOST = os.getenv("WEBSOCKET_HOST", "0.0.0.0")
WEBSOCKET_PORT = int(os.getenv("WEBSOCKET_PORT", "8765"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
