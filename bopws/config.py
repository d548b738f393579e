"""
BOP Web Service Configuration
"""
from pydantic_settings import BaseSettings
from typing import Dict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Solr
    solr_url: str = "http://localhost:8983/solr/bop"
    search_handler: str = "/select/bop/search"
    export_handler: str = "/select/bop/export"
    # Applied last; these take precedence over computed request params
    solr_override_params: Dict[str, str] = {}

    # Server
    api_prefix: str = "/tweets"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "info"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
