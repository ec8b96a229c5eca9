# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Page rendering.

``render`` only produces HTML; writing it to the client is left to the route.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render(page_name: str, data: Optional[Dict[str, Any]] = None) -> str:
    """Render ``templates/<page_name>.html``.

    Every page receives ``title``, ``user``, ``session`` and ``error``;
    missing keys default to empty values.
    """
    ctx: Dict[str, Any] = {"title": "", "user": None, "session": None, "error": ""}
    ctx.update(data or {})
    return _ENV.get_template(f"{page_name}.html").render(**ctx)
