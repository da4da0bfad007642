"""Success envelope shared by every JSON route: {success, message?, data?}."""

from __future__ import annotations

from typing import Any, Dict, Optional


def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


__all__ = ["success"]
