from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docvault"
    db_username: str = "docvault"
    db_password: str = "secret"

    files_root: Path = Path("./uploads")
    max_upload_bytes: int = 10 * 1024 * 1024

    summary_char_limit: int = 150_000
    chunk_size: int = 80_000
    max_chunks: int = 20

    max_concurrent_runs: int = 4
    shutdown_policy: Literal["drain", "abandon"] = "drain"
    sweep_poll_interval_seconds: int = 5

    pdf_engine: str = "pdfplumber"

    generation_provider: str = "openai"
    generation_temperature: float = 0.7

    generation_openai_api_key: str = ""
    generation_openai_model_name: str = "gpt-4o"
    generation_openai_timeout_seconds: int = 120

    generation_anthropic_api_key: str = ""
    generation_anthropic_model_name: str = "claude-3-5-sonnet-20241022"
    generation_anthropic_timeout_seconds: int = 120

    generation_openai_compatible_base_url: str = ""
    generation_openai_compatible_api_key: str = ""
    generation_openai_compatible_model_name: str = ""
    generation_openai_compatible_timeout_seconds: int = 120

    generation_openrouter_api_key: str = ""
    generation_openrouter_model_name: str = ""
    generation_openrouter_timeout_seconds: int = 120

    generation_groq_api_key: str = ""
    generation_groq_model_name: str = ""
    generation_groq_timeout_seconds: int = 120

    generation_together_api_key: str = ""
    generation_together_model_name: str = ""
    generation_together_timeout_seconds: int = 120

    generation_deepseek_api_key: str = ""
    generation_deepseek_model_name: str = ""
    generation_deepseek_timeout_seconds: int = 120

    generation_ollama_api_key: str = "ollama"
    generation_ollama_model_name: str = ""
    generation_ollama_timeout_seconds: int = 300
