from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, List

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]
ENV_FILES = [BASE_DIR / ".env.local", BASE_DIR / ".env"]


class Settings(BaseSettings):
    jwt_secret: str = "supersecret"
    jwt_algorithm: str = "HS256"
    jwt_expires_min: int = 60
    admin_username: str = "admin"
    admin_password: str = "admin123"
    auto_authorize_demo: bool = True
    seed_demo_data: bool = True
    log_level: str = "INFO"
    max_expiry_days: int = 7
    max_preparation_age_days: int = 3
    expiring_soon_hours: float = 2.0
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=[str(path) for path in ENV_FILES],
        case_sensitive=False,
        env_prefix="",
    )


def get_settings() -> Settings:
    return Settings()


settings = get_settings()


class InMemoryCollection:
    """Insertion-ordered document store keyed by string id.

    Documents are stored as given; callers own copying semantics. ``all``
    yields newest first, matching how the dashboards list records.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._documents: Dict[str, Any] = {}

    def find_one(self, key: str) -> Any | None:
        return self._documents.get(key)

    def contains(self, key: str) -> bool:
        return key in self._documents

    def put(self, key: str, document: Any) -> None:
        self._documents[key] = document

    def delete(self, key: str) -> bool:
        return self._documents.pop(key, None) is not None

    def all(self) -> Iterator[Any]:
        return iter(reversed(list(self._documents.values())))

    def clear(self) -> None:
        self._documents.clear()

    def __len__(self) -> int:
        return len(self._documents)


class InMemoryDatabase:
    def __init__(self, name: str = "foodlink") -> None:
        self.name = name
        self._collections: Dict[str, InMemoryCollection] = {}

    def get_collection(self, name: str) -> InMemoryCollection:
        collection = self._collections.get(name)
        if collection is None:
            collection = InMemoryCollection(name)
            self._collections[name] = collection
            logger.debug("Created in-memory collection {}.{}", self.name, name)
        return collection

    def reset(self) -> None:
        for collection in self._collections.values():
            collection.clear()


db = InMemoryDatabase()


def get_database() -> InMemoryDatabase:
    return db
