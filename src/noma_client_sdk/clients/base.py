from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..http_client import HttpClient


def unwrap(payload: dict[str, Any] | list[Any] | None) -> Any:
    """Core API responses wrap their body in a ``data`` envelope."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


@dataclass
class BaseClient:
    http: HttpClient
    module: str = "core"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        kwargs.setdefault("module", self.module)
        return unwrap(await self.http.request(method, path, **kwargs))
