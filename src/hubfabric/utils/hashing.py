from __future__ import annotations

import hashlib
import json
from typing import Any


def sha256_text(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def sha256_json(value: Any) -> str:
    payload = json.dumps(value, sort_keys=True, separators=(",", ":"))
    return sha256_text(payload)


def resource_id(prefix: str, key: str, seed: str) -> str:
    """Deterministic backend-style identifier, e.g. ``tgw-0a1b2c...``."""
    return f"{prefix}-{sha256_text(f'{seed}:{key}')[:17]}"
