"""Persisted auth token."""

import logging

from ..storage.base import KeyValueStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"


def clean_token(value: str) -> str:
    """Strip surrounding whitespace and a leading ``Bearer`` prefix."""
    token = value.strip()
    if token.startswith("Bearer "):
        token = token[len("Bearer ") :].strip()
    return token


class TokenStore:
    def __init__(self, storage: KeyValueStorage, key: str = TOKEN_KEY):
        self._storage = storage
        self._key = key

    def get(self) -> str | None:
        value = self._storage.get(self._key)
        if not value:
            return None
        return clean_token(value) or None

    def set(self, token: str) -> None:
        self._storage.set(self._key, clean_token(token))
        logger.info("Auth token stored")

    def clear(self) -> None:
        self._storage.delete(self._key)
