# core/__init__.py
from .config import settings
from .security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
    generate_reset_token,
    hash_reset_token,
)

__all__ = [
    "settings",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "generate_reset_token",
    "hash_reset_token",
]
