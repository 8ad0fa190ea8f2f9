from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
    
    # API Configuration
    app_title: str = Field(default="Graph Store API")
    app_version: str = Field(default="1.0.0")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    reload: bool = Field(default=False)
    
    # Comma separated; "*" allows any origin
    cors_origins: str = Field(default="*")
    
    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/app.log")
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Get allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        return Path(self.log_file).parent
    
    def ensure_directories(self):
        """Ensure necessary directories exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_directories()
