"""Helpers for reading vendor API responses."""

from typing import Any, Dict

import httpx


def json_or_empty(resp: httpx.Response) -> Dict[str, Any]:
    """Return the JSON object body, or {} when the body is not one."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
