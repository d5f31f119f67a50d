"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All provider endpoints, retry timings and spreadsheet constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: repository root .env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "Resume Parser"
    app_version: str = "1.0.0"
    port: int = 3001

    # Upload
    max_upload_bytes: int = 50 * 1024 * 1024

    # OpenRouter (chat-completion provider)
    openrouter_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "google/gemini-2.0-flash-exp:free"
    openrouter_key_prefix: str = "sk-or-v1-"
    openrouter_referer: str = "https://ai-resume-parser.com"
    openrouter_title: str = "Resume Parser"
    openrouter_max_chars: int = 6000
    openrouter_max_tokens: int = 1024
    openrouter_timeout: float = 90.0
    openrouter_max_attempts: int = 5

    # Gemini (structured-output provider)
    gemini_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = "gemini-2.0-flash"
    gemini_max_chars: int = 8000
    gemini_max_tokens: int = 2048
    gemini_timeout: float = 60.0
    gemini_max_attempts: int = 1

    llm_temperature: float = 0.1

    # Pre-call throttle and rate-limit backoff (seconds)
    precall_base_delay: float = 8.0
    precall_jitter_min: float = 1.0
    precall_jitter_max: float = 4.0
    precall_step_delay: float = 5.0
    rate_limit_backoff_base: float = 15.0
    rate_limit_jitter_min: float = 1.0
    rate_limit_jitter_max: float = 6.0
    connection_reset_delay: float = 10.0

    # Session stats
    session_stats_recent_files: int = 10

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


# --- Constants (non-env, business config) ---

CANDIDATE_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "skills",
    "experience_years",
    "education",
    "location",
    "summary",
)

# Spreadsheet import/export
SPREADSHEET_REQUIRED_COLUMNS: tuple[str, ...] = (
    "filename",
    "name",
    "email",
    "phone",
    "skills",
    "experience_years",
    "education",
)
SPREADSHEET_SHEET_NAME: str = "Resume_Database"
SPREADSHEET_EXPORT_FILENAME: str = "resume_database.xlsx"
SKILLS_DELIMITER: str = ", "
