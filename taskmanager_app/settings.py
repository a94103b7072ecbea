# taskmanager_app/settings.py
from __future__ import annotations

import json
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # --- DB ---
    DATABASE_URL: str = Field(default='sqlite:///./taskmanager.db')
    DB_CREATE_TABLES: bool = Field(default=True)

    # --- JWT ---
    # No default: the process must not start without a signing secret.
    JWT_SECRET: str
    JWT_ALGORITHM: str = Field(default='HS256')
    ACCESS_TOKEN_EXPIRE_MINUTES: float = Field(default=60 * 24, gt=0)

    # --- CORS ---
    # NoDecode: comma separated values reach parse_cors as a raw string
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default=["*"])

    # --- Runtime ---
    APP_ENV: str = Field(default='development')
    LOG_LEVEL: str = Field(default='INFO')
    HOST: str = Field(default='0.0.0.0')
    PORT: int = Field(default=5000)

    @field_validator("JWT_SECRET")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET must be a non-empty string")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v):
        """
        Accepts:
        - JSON: '["http://a","http://b"]'
        - Comma separated: 'http://a,http://b'
        - Empty: falls back to the default
        """
        if v is None:
            return ["*"]
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return ["*"]
            if s.startswith("["):
                try:
                    return json.loads(s)
                except json.JSONDecodeError:
                    raise ValueError("CORS_ORIGINS must be valid JSON or a comma separated list.")
            return [part.strip() for part in s.split(",") if part.strip()]
        return v


settings = Settings()
