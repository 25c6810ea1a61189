import logging
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from application.core.secret_manager import SecretManager

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    project_name: str = "assign_read_api"
    key_vault_name: Optional[str] = None

    # pyodbc connection string, e.g. "Driver={ODBC Driver 18 for SQL Server};Server=...;"
    sql_url: Optional[str] = None
    sql_timeout: int = 30

    # Unset means every bearer token is rejected
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def load_from_vault(self):
        sm = SecretManager(self.key_vault_name)
        self.jwt_secret_key = sm.get_secret("jwt-secret")


@lru_cache()
def get_settings():
    settings = Settings()
    if settings.key_vault_name:
        settings.load_from_vault()
    if not settings.jwt_secret_key:
        logger.warning("JWT_SECRET_KEY is not set; authenticated endpoints will fail")
    return settings
