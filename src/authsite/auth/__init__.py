# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication core.

This package provides:
- Password hashing/verification (argon2, "salt:hash" records)
- User storage (SQLAlchemy)
- Server-side sessions keyed by random ids
- Session cookie parsing/formatting
- Per-request identity resolution
"""
