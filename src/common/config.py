import os
from typing import Dict, List, Optional
from dotenv import load_dotenv
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

# Load environment variables from the correct .env file
env_file = ".env.production" if os.getenv("APP_ENV") == "production" else ".env"
load_dotenv(env_file)

DEFAULT_DEPARTMENT_EMAILS = {
    "technical": "it@jayprasad.com.np",
    "admin": "admin@jayprasad.com.np",
    "general": "contact@jayprasad.com.np",
    "info": "info@jayprasad.com.np",
}

class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "info"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    # Comma-separated list of origins
    ALLOWED_ORIGINS: str = "*"

    # Email settings
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_FROM: str = "no-reply@jayprasad.com.np"
    SMTP_FROM_NAME: str = "Website Contact"
    SMTP_TIMEOUT: float = 60

    # Captcha settings
    RECAPTCHA_SECRET: Optional[str] = None
    RECAPTCHA_MIN_SCORE: float = 0.3
    RECAPTCHA_VERIFY_URL: str = "https://www.google.com/recaptcha/api/siteverify"
    RECAPTCHA_TIMEOUT: float = 10
    CAPTCHA_INSECURE_MODE: bool = False

    # Rate limiting
    CONTACT_RATE_LIMIT: str = "10/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_ENABLED: bool = True

    # Department -> mailbox, as a JSON object in the environment
    DEPARTMENT_EMAILS: Dict[str, str] = dict(DEFAULT_DEPARTMENT_EMAILS)

    @field_validator("RECAPTCHA_SECRET", "SMTP_USER", "SMTP_PASS", mode="before")
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("DEPARTMENT_EMAILS")
    def require_general_department(cls, value):
        if "general" not in value:
            raise ValueError("DEPARTMENT_EMAILS must define a 'general' address")
        return value

    @model_validator(mode="after")
    def validate_captcha_mode(self):
        """Refuse to run without captcha enforcement unless explicitly asked to."""
        if self.RECAPTCHA_SECRET:
            return self
        if not self.CAPTCHA_INSECURE_MODE:
            raise ValueError(
                "RECAPTCHA_SECRET is not set. Set CAPTCHA_INSECURE_MODE=true to "
                "accept submissions without captcha verification."
            )
        if self.APP_ENV == "production":
            raise ValueError(
                "CAPTCHA_INSECURE_MODE cannot be enabled when APP_ENV=production"
            )
        return self

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def captcha_bypassed(self) -> bool:
        return not self.RECAPTCHA_SECRET

settings = Settings()
