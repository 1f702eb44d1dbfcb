from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx

from breadboard_client._config import ClientConfig, http_debug_enabled
from breadboard_client._errors import BreadboardAPIError, BreadboardTransportError

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
KEY_HEADER = "$key"
KEY_PARAM = "API_KEY"


def _parse_error_response(
    status_code: int,
    body_text: str,
    content_type: str,
    *,
    operation: str,
    reason: str | None = None,
    url: str | None = None,
) -> BreadboardAPIError:
    """
    Build a BreadboardAPIError from an error response.

    Uses the server message when the body is JSON with an ``error`` or ``message``
    field, then the raw body text, then the HTTP reason phrase.
    """
    detail: str | None = None

    if body_text and body_text.strip() and "application/json" in content_type.lower():
        try:
            data = json.loads(body_text)
        except ValueError:
            data = None

        if isinstance(data, dict):
            error_obj = data.get("error")
            if isinstance(error_obj, str) and error_obj.strip():
                detail = error_obj.strip()
            elif isinstance(error_obj, dict):
                msg = error_obj.get("message")
                if isinstance(msg, str) and msg.strip():
                    detail = msg.strip()
            if detail is None:
                msg = data.get("message")
                if isinstance(msg, str) and msg.strip():
                    detail = msg.strip()

    if detail is None and body_text and body_text.strip():
        detail = body_text.strip()
    if detail is None:
        detail = reason or "HTTP error"

    return BreadboardAPIError(
        status_code=status_code,
        message=f"{operation}: {detail}",
        body=body_text or None,
        reason=reason,
        url=url,
    )


def _redact_url(url: Any) -> str:
    parsed = httpx.URL(str(url))
    if KEY_PARAM in parsed.params:
        parsed = parsed.copy_set_param(KEY_PARAM, REDACTED)
    return str(parsed)


def _redact_headers(headers: dict[str, Any]) -> dict[str, Any]:
    out = dict(headers)
    if KEY_HEADER in out:
        out[KEY_HEADER] = REDACTED
    return out


def _redact_body(content: bytes) -> str:
    text = content.decode("utf-8", "ignore")
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict) and KEY_HEADER in data:
        data[KEY_HEADER] = REDACTED
        return json.dumps(data)
    return text


def _response_url(resp: Any) -> str | None:
    try:
        return str(resp.request.url)
    except (AttributeError, RuntimeError):
        return None


class BreadboardHttpClient:
    """
    Lightweight HTTPX wrapper with:
    - JSON requests
    - streamed responses opened eagerly, so HTTP errors surface before any event
    - optional debug logging (BREADBOARD_HTTP_DEBUG)
    """

    def __init__(self, *, config: ClientConfig) -> None:
        self._config = config
        self._debug_http = http_debug_enabled()

        def _log_request(request: httpx.Request) -> None:
            if not self._debug_http:
                return
            logger.warning("HTTPX REQUEST %s %s", request.method, _redact_url(request.url))
            logger.warning("HTTPX REQUEST headers=%s", _redact_headers(dict(request.headers)))
            if request.content:
                try:
                    logger.warning("HTTPX REQUEST body=%s", _redact_body(request.content))
                except Exception:
                    logger.warning("HTTPX REQUEST body=(binary) len=%s", len(request.content))

        def _log_response_head(response: httpx.Response) -> bool:
            req = response.request
            logger.warning(
                "HTTPX RESPONSE %s %s -> %s", req.method, _redact_url(req.url), response.status_code
            )
            logger.warning("HTTPX RESPONSE headers=%s", dict(response.headers))
            ctype = response.headers.get("content-type", "")
            if "text/event-stream" in ctype:
                logger.warning("HTTPX RESPONSE body=(event-stream; not auto-logged)")
                return False
            return True

        def _log_response_sync(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_head(response):
                return
            try:
                response.read()
                logger.warning("HTTPX RESPONSE body=%s", response.text)
            except Exception as e:
                logger.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        async def _log_request_async(request: httpx.Request) -> None:
            _log_request(request)

        async def _log_response_async(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_head(response):
                return
            try:
                await response.aread()
                logger.warning("HTTPX RESPONSE body=%s", response.text)
            except Exception as e:
                logger.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        EventHooksDict = dict[str, list[Callable[..., Any]]]

        hooks_sync: EventHooksDict = {"request": [_log_request], "response": [_log_response_sync]}
        hooks_async: EventHooksDict = {"request": [_log_request_async], "response": [_log_response_async]}

        self._client = httpx.Client(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_sync)
        self._aclient = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_async)

    @property
    def api_key(self) -> str:
        return self._config.api_key

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        await self._aclient.aclose()

    def _url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    def _headers(self, *, accept: str | None = None, with_key: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if accept:
            headers["Accept"] = accept
        if with_key:
            headers[KEY_HEADER] = self._config.api_key
        return headers

    @staticmethod
    def raise_for_status(resp: Any, *, operation: str = "Request failed") -> None:
        """Check the status and raise a BreadboardAPIError for anything outside 2xx."""
        if 200 <= resp.status_code < 300:
            return

        body_text: str | None = None
        try:
            body_text = resp.text
        except Exception:
            body_text = None

        headers = getattr(resp, "headers", None) or {}
        error = _parse_error_response(
            status_code=resp.status_code,
            body_text=body_text or "",
            content_type=headers.get("content-type", ""),
            operation=operation,
            reason=getattr(resp, "reason_phrase", None),
            url=_response_url(resp),
        )

        raise error

    def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        with_key: bool = False,
        operation: str = "Request failed",
    ) -> httpx.Response:
        try:
            resp = self._client.get(self._url(path), headers=self._headers(with_key=with_key), params=params)
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        self.raise_for_status(resp, operation=operation)
        return resp

    async def aget(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        with_key: bool = False,
        operation: str = "Request failed",
    ) -> httpx.Response:
        try:
            resp = await self._aclient.get(
                self._url(path), headers=self._headers(with_key=with_key), params=params
            )
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        self.raise_for_status(resp, operation=operation)
        return resp

    def post_json(
        self,
        path: str,
        payload: dict[str, Any] | None = None,
        *,
        with_key: bool = False,
        operation: str = "Request failed",
    ) -> httpx.Response:
        try:
            resp = self._client.post(self._url(path), headers=self._headers(with_key=with_key), json=payload)
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        self.raise_for_status(resp, operation=operation)
        return resp

    async def apost_json(
        self,
        path: str,
        payload: dict[str, Any] | None = None,
        *,
        with_key: bool = False,
        operation: str = "Request failed",
    ) -> httpx.Response:
        try:
            resp = await self._aclient.post(
                self._url(path), headers=self._headers(with_key=with_key), json=payload
            )
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        self.raise_for_status(resp, operation=operation)
        return resp

    def open_stream(self, path: str, payload: dict[str, Any], *, operation: str) -> httpx.Response:
        """
        POST ``payload`` and return the response with its body still unread.

        The caller owns the response and must close it. Error responses are read,
        closed and raised here, so a returned response is always 2xx.
        """
        request = self._client.build_request(
            "POST", self._url(path), headers=self._headers(accept="text/event-stream"), json=payload
        )
        try:
            resp = self._client.send(request, stream=True)
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e

        if resp.is_success:
            return resp
        try:
            resp.read()
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        finally:
            resp.close()
        self.raise_for_status(resp, operation=operation)
        return resp

    async def aopen_stream(self, path: str, payload: dict[str, Any], *, operation: str) -> httpx.Response:
        """Async version of open_stream(); close the response with ``aclose()``."""
        request = self._aclient.build_request(
            "POST", self._url(path), headers=self._headers(accept="text/event-stream"), json=payload
        )
        try:
            resp = await self._aclient.send(request, stream=True)
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e

        if resp.is_success:
            return resp
        try:
            await resp.aread()
        except httpx.RequestError as e:
            raise BreadboardTransportError(f"{operation}: {e}") from e
        finally:
            await resp.aclose()
        self.raise_for_status(resp, operation=operation)
        return resp
