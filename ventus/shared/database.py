"""Database connection configuration."""

import os
from dataclasses import dataclass


@dataclass
class DBConfig:
    """Database connection configuration."""
    host: str
    user: str
    password: str
    database: str
    port: int = 3306

    @classmethod
    def from_env(cls) -> "DBConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_DATABASE", "ventus"),
            port=int(os.getenv("DB_PORT", "3306")),
        )
