from functools import lru_cache
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    base_url: str = "https://willclower.app.n8n.cloud"
    webhook_path: str = "webhook"
    default_assistant: str = "nona"
    default_user_name: str = "Guest"
    request_timeout: float = 30.0
    confirm_assistant_switch: bool = True
    # Empty path keeps the session in memory only
    storage_path: str = ".mw_session.json"
    static_dir: str = "frontend/static"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "MW_",
        "extra": "ignore",
    }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
