"""JSONB column helpers.

Parameters are bound as JSON text and cast in SQL; reads accept either a
decoded value or raw text depending on the driver's codec setup.
"""

from __future__ import annotations

import json
from typing import Any


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def load_json(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
