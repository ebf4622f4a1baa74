from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Solar Chat Gateway"
    app_version: str = "0.1.0"
    upstage_api_key: str = ""
    upstage_base_url: str = "https://api.upstage.ai/v1"
    upstage_extraction_base_url: str = "https://api.upstage.ai/v1/information-extraction"
    upstage_document_url: str = "https://api.upstage.ai/v1/document-digitization"
    chat_model: str = "solar-pro2"
    chat_reasoning_effort: str = "high"
    extraction_model: str = "information-extract"
    max_upload_size_bytes: int = 50 * 1024 * 1024  # 50MB
    document_timeout_seconds: float = 120.0
    logs_path: str = "logs"
    llm_logging_enabled: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
