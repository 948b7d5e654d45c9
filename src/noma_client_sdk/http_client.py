from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from .auth_store import AuthStore
from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import ApiError, ReauthenticationRequired, TransportError
from .log import log_json
from .renewal import RenewalCoordinator

logger = logging.getLogger(__name__)

TRACE_HEADER_ALIASES = ("X-Trace-ID", "X-Trace-Id", "X-Request-ID")

ResponseHook = Callable[[httpx.Response], None]
RequestHook = Callable[["RequestSpec"], None]


@dataclass
class RequestSpec:
    """An outbound request as it is replayed through renewal."""

    method: str
    path: str
    json_body: Any = None
    params: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    with_auth: bool = True
    retry_count: int = 0
    credential: str | None = None


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None
    retries: int = 0


def _trace_id(response: httpx.Response) -> str | None:
    for key in TRACE_HEADER_ALIASES:
        value = response.headers.get(key)
        if value:
            return value
    return None


@dataclass
class HttpClient:
    config: ClientConfig
    base_url: str
    auth_store: AuthStore
    coordinator: RenewalCoordinator | None = None
    client: httpx.AsyncClient | None = None
    transport: httpx.AsyncBaseTransport | None = None
    before_request: RequestHook | None = None
    after_response: ResponseHook | None = None
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url.rstrip("/") + "/",
                timeout=httpx.Timeout(
                    self.config.read_timeout_seconds,
                    connect=self.config.connect_timeout_seconds,
                ),
                limits=httpx.Limits(max_connections=self.config.max_connections),
                verify=self.config.verify_ssl,
                transport=self.transport,
            )

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        with_auth: bool = True,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | None:
        spec = RequestSpec(
            method=method.upper(),
            path=path if path.startswith("/") else f"/{path}",
            json_body=json_body,
            params=params,
            headers=dict(headers or {}),
            with_auth=with_auth,
        )
        return await self.send(spec, module=module, operation=operation)

    async def send(
        self,
        spec: RequestSpec,
        *,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | None:
        started = time.monotonic()
        while True:
            sent_with = self._credential_for(spec)
            response = await self._dispatch(spec, sent_with)
            if response.status_code != 401 or not self._can_renew(spec):
                break
            if spec.retry_count >= self.config.max_auth_retries:
                logger.warning(
                    "auth_retry_ceiling_hit",
                    extra={"path": spec.path, "retries": spec.retry_count},
                )
                self._record_operation(module, operation, started, "reauthenticate", _trace_id(response), spec)
                self.coordinator.abandon("retry_ceiling")
                raise ReauthenticationRequired(
                    code="REAUTHENTICATION_REQUIRED",
                    message="Credential was rejected after renewal; sign in again",
                    trace_id=_trace_id(response),
                    status_code=401,
                )
            spec.credential = await self.coordinator.renew(failed_token=sent_with)
            spec.retry_count += 1

        if self.after_response:
            self.after_response(response)
        trace_id = _trace_id(response)
        if response.is_success:
            if not response.content:
                self._record_operation(module, operation, started, "success", trace_id, spec)
                return None
            try:
                data = response.json()
            except json.JSONDecodeError as exc:
                self._record_operation(module, operation, started, "error", trace_id, spec)
                raise ApiError(
                    code="INVALID_RESPONSE",
                    message="Response body is not valid JSON",
                    details={"path": spec.path, "content_type": response.headers.get("Content-Type")},
                    trace_id=trace_id,
                    status_code=response.status_code,
                ) from exc
            self._record_operation(module, operation, started, "success", trace_id, spec)
            return data

        try:
            payload = response.json()
        except json.JSONDecodeError:
            payload = {"message": response.text}
        self._record_operation(module, operation, started, "error", trace_id, spec)
        raise map_error(response.status_code, payload if isinstance(payload, dict) else {"details": payload}, trace_id)

    def _credential_for(self, spec: RequestSpec) -> str | None:
        if not spec.with_auth:
            return None
        return spec.credential or self.auth_store.token

    def _can_renew(self, spec: RequestSpec) -> bool:
        return (
            spec.with_auth
            and self.coordinator is not None
            and spec.path != self.config.refresh_path
        )

    async def _dispatch(self, spec: RequestSpec, credential: str | None) -> httpx.Response:
        if self.client is None:
            raise RuntimeError("HTTP client not initialized")
        headers = {"Accept": "application/json", **spec.headers}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        if self.before_request:
            self.before_request(spec)
        try:
            return await self.client.request(
                spec.method,
                spec.path,
                json=spec.json_body,
                params=spec.params,
                headers=headers,
            )
        except httpx.TransportError as exc:
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc) or type(exc).__name__,
                details={"type": type(exc).__name__, "path": spec.path},
                status_code=0,
            ) from exc

    def _record_operation(
        self,
        module: str,
        operation: str,
        started: float,
        result: str,
        trace_id: str | None,
        spec: RequestSpec,
    ) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=trace_id,
            retries=spec.retry_count,
        )
        log_json(
            logger,
            {
                "event": "http_operation",
                "module": module,
                "operation": operation,
                "method": spec.method,
                "path": spec.path,
                "result": result,
                "duration_ms": self.last_operation.duration_ms,
                "retries": spec.retry_count,
                "trace_id": trace_id,
            },
            logging.DEBUG,
        )
