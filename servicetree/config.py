"""Application configuration."""
from pydantic_settings import BaseSettings
from typing import Literal, Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    """Application settings.

    Non-sensitive configuration is defined here with sensible defaults.
    Secrets (database and API passwords) are loaded from environment variables.

    Priority: Environment variables > .env file > defaults defined here
    """

    # App Configuration
    APP_NAME: str = "servicetree"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False  # Enables traversal debug messages
    LOG_LEVEL: str = "info"

    # Database Configuration (the monitoring platform's database)
    DB_TYPE: Literal["mysql", "postgresql", "sqlite"] = "mysql"
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None
    DB_NAME: str = "zabbix"
    DB_USER: str = "zabbix"
    DB_PASSWORD: str = ""  # MUST be set via env var
    DB_URL: Optional[str] = None  # Full SQLAlchemy URL, overrides the fields above

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from components."""
        if self.DB_URL:
            return self.DB_URL
        if self.DB_TYPE == "sqlite":
            return f"sqlite:///{self.DB_NAME}"

        driver = "mysql+pymysql" if self.DB_TYPE == "mysql" else "postgresql+psycopg2"
        port = self.DB_PORT or (3306 if self.DB_TYPE == "mysql" else 5432)
        password = quote_plus(self.DB_PASSWORD)
        url = f"{driver}://{self.DB_USER}:{password}@{self.DB_HOST}:{port}/{self.DB_NAME}"
        return url + "?charset=utf8mb4" if self.DB_TYPE == "mysql" else url

    # Management API Configuration (delegated node creation)
    ZABBIX_API_URL: str = "http://localhost/zabbix/api_jsonrpc.php"
    ZABBIX_API_USER: str = "Admin"
    ZABBIX_API_PASSWORD: str = ""  # MUST be set via env var
    ZABBIX_API_PASSWORD_ENCRYPTED: bool = False  # Decrypt with ENCRYPTION_KEY before use
    API_TIMEOUT: float = 30.0

    # Import Configuration
    IMPORT_STRATEGY: Literal["store", "api"] = "store"
    NODE_PREFIX: Optional[int] = None  # Distributed node id; looked up in `ids` when unset

    # Encryption (Secret - MUST be set via env var when passwords are encrypted)
    ENCRYPTION_KEY: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
