"""Configuration management for the Job Board service."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Application Configuration
    app_name: str = Field("Job Board API", description="Application title")
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")
    
    # Database Configuration
    database_url: str = Field("sqlite:///./job_board.db", description="SQLAlchemy database URL")
    database_echo: bool = Field(False, description="Echo SQL statements")
    
    # Server Configuration
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(8000, description="Server port")
    reload: bool = Field(False, description="Enable auto-reload")
    allowed_origins: list[str] = Field(["*"], description="CORS allowed origins")
    allowed_hosts: Optional[list[str]] = Field(None, description="Trusted hosts")
    
    # Security
    jwt_secret_key: str = Field("change-me-in-production-with-a-long-random-value", description="JWT secret key")
    jwt_algorithm: str = Field("HS256", description="JWT algorithm")
    jwt_expiration_hours: int = Field(24, description="JWT expiration hours")
    
    # Pagination
    default_page_size: int = Field(10, description="Default page size")
    max_page_size: int = Field(100, description="Maximum page size")
    
    # Blob Storage Configuration
    cloudinary_cloud_name: Optional[str] = Field(None, description="Cloudinary cloud name")
    cloudinary_api_key: Optional[str] = Field(None, description="Cloudinary API key")
    cloudinary_api_secret: Optional[str] = Field(None, description="Cloudinary API secret")
    storage_base_url: str = Field("https://api.cloudinary.com/v1_1", description="Upload API base URL")
    storage_timeout: float = Field(30.0, description="Storage request timeout in seconds")
    resume_max_bytes: int = Field(5 * 1024 * 1024, description="Maximum resume size in bytes")
    resume_folder: str = Field("resumes", description="Storage folder for resumes")


# Global settings instance
settings = Settings()
