from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    max_file_size_bytes: int = 10 * 1024 * 1024
    max_ocr_pages: int = 5
    raster_scale: float = 2.0
    ocr_languages: str = "fra+eng"
    ocr_concurrency: int = 1
    pdf_engine: str = "pdfplumber"
    stage_timeout_seconds: float = 60.0

    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_base_url: str = ""
    llm_text_model: str = "gpt-4.1-mini"
    llm_vision_model: str = "gpt-4o"
    llm_timeout_seconds: int = 30
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.3
    llm_max_attempts: int = 3
    llm_retry_initial_delay_seconds: float = 1.0
    max_validation_retries: int = 1

    prompt_cost_per_1k_tokens: float = 0.01
    completion_cost_per_1k_tokens: float = 0.03
