"""
Centralized application configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env"""

    # API Settings
    API_TITLE: str = "Gestionale Ordini API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Backend ordini, clienti e resoconti di consegna"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (checked when a connection is requested, not at import)
    DATABASE_URL: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:4200,https://yourdomain.com" or '["http://localhost:4200"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:4200"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:4200"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # Mail (SMTP over implicit TLS by default, Gmail style)
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 465
    MAIL_USE_TLS: bool = True
    MAIL_USER: str = ""
    MAIL_PASS: str = ""
    MAIL_FROM_NAME: str = "Lab di Abigail"
    MAIL_TIMEOUT: float = 30.0
    STAFF_EMAIL: str = ""

    def get_staff_email(self) -> str:
        """Staff inbox; the sending account is used when not set"""
        return self.STAFF_EMAIL or self.MAIL_USER

    # Daily delivery report
    REPORT_TIMEZONE: str = "Europe/Rome"
    REPORT_WINDOW_DAYS: int = 5
    REPORT_API_KEY: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
