"""Настройки подключения docgraph к базе документов."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocGraphSettings(BaseSettings):
    """Параметры окружения для клиента базы и CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DOCGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    arango_url: str = Field("http://localhost:8529", description="Базовый URL HTTP API базы")
    arango_database: str = Field("_system", min_length=1, description="Имя базы данных")
    arango_user: str | None = Field(None, description="Пользователь для basic auth")
    arango_password: str | None = Field(None, description="Пароль для basic auth")
    request_timeout: float = Field(10.0, ge=1.0, description="Таймаут HTTP-запроса, сек.")
    log_level: str = Field("INFO", description="Уровень логирования CLI")


@lru_cache
def get_settings() -> DocGraphSettings:
    return DocGraphSettings()


__all__ = ["DocGraphSettings", "get_settings"]
