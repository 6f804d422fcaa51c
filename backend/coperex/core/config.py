from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="Coperex API", alias="APP_NAME")
    env: str = Field(default="dev", alias="ENV")
    api_prefix: str = Field(default="/coperex/v1", alias="API_PREFIX")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    secret_key: str = Field(default="devsecret", alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    cors_origins_raw: Optional[str] = Field(default=None, alias="CORS_ORIGINS", description="Comma separated list of allowed CORS origins")
    auto_apply_migrations: bool = Field(default=True, alias="AUTO_APPLY_MIGRATIONS")
    # limits syntax, e.g. "100 per 15 minutes"
    rate_limit: str = Field(default="100 per 15 minutes", alias="RATE_LIMIT")
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    # Default administrator created on first start
    seed_admin_name: str = Field(default="admin", alias="SEED_ADMIN_NAME")
    seed_admin_surname: str = Field(default="123", alias="SEED_ADMIN_SURNAME")
    seed_admin_username: str = Field(default="admin123", alias="SEED_ADMIN_USERNAME")
    seed_admin_email: str = Field(default="admin123@example.com", alias="SEED_ADMIN_EMAIL")
    seed_admin_password: str = Field(default="SecureP@ssword123", alias="SEED_ADMIN_PASSWORD")
    seed_admin_phone: str = Field(default="12345678", alias="SEED_ADMIN_PHONE")

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
    def is_production(self) -> bool:
        return self.env.lower() == "prod"

    @property
    def cors_origins(self) -> List[str]:
        items = self._parse_list(self.cors_origins_raw)
        # Fallback dev defaults if none provided
        if not items:
            return ["http://localhost:3000", "http://127.0.0.1:3000"]
        return items

settings = Settings()  # type: ignore
