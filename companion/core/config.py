# companion/core/config.py
# -*- coding: utf-8 -*-
"""
Companion Server — Configuration
--------------------------------
Central configuration for the companion server, including:

- app metadata
- API host/port
- filesystem paths (datastore document, prompts, logs)
- chat-completion provider (OpenAI-compatible HTTP),
- web search provider (best-effort lookups),
- progression tuning (points per chat turn, quiz reward, memory window),
- admin token and basic safety limits.

"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

# This file is: <root>/companion/core/config.py
APP_DIR: Path = Path(__file__).resolve().parents[1]   # .../companion
ROOT_DIR: Path = APP_DIR.parent                       # project root

PROMPTS_DIR: Path = APP_DIR / "prompts"
DATA_DIR: Path = ROOT_DIR / "data"


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """
    Global configuration for the companion server.

    This class is instantiated once at import time as `settings`
    and used everywhere in the codebase.
    """

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App / server basics -----------------------------------------------
    app_name: str = "Companion Server"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # --- Filesystem paths ---------------------------------------------------
    prompts_dir: Path = PROMPTS_DIR

    # The whole datastore lives in this one JSON document.
    data_path: Path = DATA_DIR / "companion_db.json"

    # --- Chat completion provider (OpenAI-compatible) -----------------------
    completion_base_url: str = "https://api.openai.com/v1/chat/completions"

    # ENV: COMPLETION_API_KEY=sk-...  (OPENAI_API_KEY is accepted too)
    completion_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("completion_api_key", "openai_api_key"),
        description="API key for the completion provider (env: COMPLETION_API_KEY).",
    )
    completion_model: str = "gpt-4o"
    completion_timeout_s: float = 20.0
    completion_max_tokens: int = 400
    completion_temperature: float = 0.7

    # --- Web search provider ------------------------------------------------
    search_enabled: bool = True
    search_url: str = "https://api.duckduckgo.com/"
    search_timeout_s: float = 5.0

    # --- Progression tuning -------------------------------------------------
    chat_base_points: int = 10
    daily_question_reward: int = 25
    default_memory_window: int = 30

    # --- Admin --------------------------------------------------------------
    # ENV: ADMIN_TOKEN=...  Unset means every admin call is forbidden.
    admin_token: str | None = Field(
        default=None,
        description="Shared secret for /api/admin/* (env: ADMIN_TOKEN).",
    )

    # --- Safety / limits ----------------------------------------------------
    max_reply_chars: int = 1200      # Hard cap on reply length
    max_user_chars: int = 512        # Hard cap on accepted user text


# Single global settings instance used by the rest of the app.
settings = Settings()
