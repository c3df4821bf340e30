from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./data/uam.db"

    # Tokens come from the external auth provider (shared secret)
    secret_key: str = "changeme"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 8

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    frontend_url: str = "http://localhost:3000"

    # Documents
    upload_root: str = "./private_uploads"
    upload_subdirectory: str = "invoices"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MB
    max_image_bytes: int = 5 * 1024 * 1024  # 5 MB, asset images and avatars

    # External PDF renderer (headless browser service)
    pdf_renderer_url: str = "http://localhost:3001/render"
    pdf_renderer_timeout: float = 60.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
