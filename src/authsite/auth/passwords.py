# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac
import secrets

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

SALT_BYTES = 16
HASH_BYTES = 32
TIME_COST = 3
MEMORY_COST_KIB = 64 * 1024
PARALLELISM = 4
SEPARATOR = ":"


def _derive(plain: str, salt: bytes) -> bytes:
    return hash_secret_raw(
        secret=plain.encode("utf-8"),
        salt=salt,
        time_cost=TIME_COST,
        memory_cost=MEMORY_COST_KIB,
        parallelism=PARALLELISM,
        hash_len=HASH_BYTES,
        type=Type.ID,
    )


def hash_password(plain: str) -> str:
    """Return ``salt:hash``, both hex encoded, with a fresh random salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{salt.hex()}{SEPARATOR}{_derive(plain, salt).hex()}"


def verify_password(plain: str, stored: str) -> bool:
    if not stored:
        return False
    parts = stored.split(SEPARATOR)
    if len(parts) != 2:
        return False
    try:
        salt = bytes.fromhex(parts[0])
        expected = bytes.fromhex(parts[1])
    except ValueError:
        return False
    if len(salt) < SALT_BYTES or not expected:
        return False
    try:
        derived = _derive(plain or "", salt)
    except HashingError:
        return False
    return hmac.compare_digest(derived, expected)
