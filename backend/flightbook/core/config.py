from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="FlightBook API", alias="APP_NAME")
    env: str = Field(default="dev", alias="ENV")
    secret_key: str = Field(default="devsecret", alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Raw env values (strings), parsed to lists via properties to avoid JSON decoding errors
    admin_emails_raw: Optional[str] = Field(default=None, alias="ADMIN_EMAILS")
    cors_origins_raw: Optional[str] = Field(default=None, alias="CORS_ORIGINS", description="Comma separated list of allowed CORS origins")
    seed_admin_email: Optional[str] = Field(default=None, alias="SEED_ADMIN_EMAIL")
    seed_admin_password: Optional[str] = Field(default=None, alias="SEED_ADMIN_PASSWORD")
    # Booking rules
    cancellation_cutoff_hours: int = Field(default=24, alias="CANCELLATION_CUTOFF_HOURS")
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    class Config:
        # Load env from backend/.env regardless of CWD
        env_file = str(Path(__file__).resolve().parents[2] / ".env")
        case_sensitive = False

    def _parse_list(self, v: Optional[str]) -> List[str]:
        if v is None:
            return []
        s = v.strip()
        if not s:
            return []
        if s.startswith("[") and s.endswith("]"):
            import json
            try:
                loaded = json.loads(s)
            except ValueError:
                loaded = None
            if isinstance(loaded, list):
                return [str(e).strip() for e in loaded if str(e).strip()]
        return [e.strip() for e in s.split(",") if e.strip()]

    @property
    def admin_emails(self) -> List[str]:
        return [e.lower() for e in self._parse_list(self.admin_emails_raw)]

    @property
    def cors_origins(self) -> List[str]:
        items = self._parse_list(self.cors_origins_raw)
        if not items:
            return ["http://localhost:3000", "http://127.0.0.1:3000"]
        return items

settings = Settings()  # type: ignore
