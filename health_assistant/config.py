from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 2048
    ctgov_api_base: str = "https://clinicaltrials.gov/api/v2"
    trials_page_size: int = 5
    trials_timeout_seconds: float = 30.0
    host: str = "0.0.0.0"
    port: int = 8100
    log_level: str = "info"
    frontend_url: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
