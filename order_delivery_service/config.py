import os
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.engine import URL

SERVER_HOST = "0.0.0.0"
SERVER_PORT = 9090


class Settings(BaseModel):
    """Service configuration, read from environment variables"""
    db_host: str = "localhost"
    db_user: str = "postgres"
    db_password: str = "1234"
    db_name: str = "order_delivery"
    db_port: int = 5432
    db_sslmode: str = "disable"
    # Overrides the DB_* values when set
    database_url: Optional[str] = None
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @classmethod
    def from_env(cls) -> "Settings":
        """Unset and empty variables fall back to the field defaults"""
        env = {
            "db_host": os.getenv("DB_HOST"),
            "db_user": os.getenv("DB_USER"),
            "db_password": os.getenv("DB_PASSWORD"),
            "db_name": os.getenv("DB_NAME"),
            "db_port": os.getenv("DB_PORT"),
            "db_sslmode": os.getenv("DB_SSLMODE"),
            "database_url": os.getenv("DATABASE_URL"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        return cls(**{key: value for key, value in env.items() if value})

    @property
    def sqlalchemy_url(self):
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"sslmode": self.db_sslmode},
        )
