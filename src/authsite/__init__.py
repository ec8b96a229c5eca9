# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Minimal server-rendered site with registration, login and cookie sessions."""

__version__ = "0.1.0"
