"""
Client for a Breadboard board server.

Catalog calls (list/get/describe) are plain request/response calls. Run and
invoke calls return a lazy stream of run events decoded from the server's
event stream; HTTP errors are raised before the first event is produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Iterable, Sequence

import httpx
from pydantic import TypeAdapter

from breadboard_client._client import BreadboardHttpClient
from breadboard_client._config import DEFAULT_TIMEOUT_S, ClientConfig
from breadboard_client._errors import BreadboardTransportError
from breadboard_client._stream import (
    acollect_run_events,
    adecode_run_events,
    collect_run_events,
    decode_run_events,
    get_next_token,
)
from breadboard_client.events import RunEvent
from breadboard_client.types import BoardDescribeResponse, BoardListEntry, BoardRequest, GraphDescriptor

_BOARD_LIST = TypeAdapter(list[BoardListEntry])


def _board_path(user: str, board: str, suffix: str) -> str:
    return f"/boards/@{user}/{board}{suffix}"


def _normalize_board_ref(user: str, board: str) -> tuple[str, str]:
    """Accept "@user" and "@user/board.json" style references as well as bare names."""
    board = board[: -len(".json")] if board.endswith(".json") else board
    user = user[1:] if user.startswith("@") else user
    board = board.replace(f"@{user}/", "")
    return user, board


def _as_request(
    request: BoardRequest | None,
    user: str | None,
    board: str | None,
    data: dict[str, Any] | None,
    next: str | None,
) -> BoardRequest:
    if request is not None:
        return request
    if not user or not board:
        raise ValueError("Pass a BoardRequest or both user and board")
    return BoardRequest(user=user, board=board, data=data or {}, next=next)


class RunEventStream:
    """
    Single-pass iterator over the run events of one streamed response.

    Owns the HTTP response: it is closed when the events run out, when a read
    fails, or on ``close()``, even if iteration never started.
    """

    def __init__(self, resp: httpx.Response, operation: str, *, flush_on_close: bool = False) -> None:
        self._resp = resp
        self._operation = operation
        self._events = decode_run_events(resp.iter_text(), flush_on_close=flush_on_close)

    def __iter__(self) -> RunEventStream:
        return self

    def __next__(self) -> RunEvent:
        try:
            return next(self._events)
        except StopIteration:
            self.close()
            raise
        except httpx.RequestError as e:
            self.close()
            raise BreadboardTransportError(f"{self._operation}: {e}") from e

    def close(self) -> None:
        self._events.close()
        self._resp.close()

    def __enter__(self) -> RunEventStream:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __del__(self) -> None:
        resp = getattr(self, "_resp", None)
        if resp is not None:
            resp.close()


class AsyncRunEventStream:
    """Async version of RunEventStream; close it with ``aclose()`` or ``async with``."""

    def __init__(self, resp: httpx.Response, operation: str, *, flush_on_close: bool = False) -> None:
        self._resp = resp
        self._operation = operation
        self._events = adecode_run_events(resp.aiter_text(), flush_on_close=flush_on_close)

    def __aiter__(self) -> AsyncRunEventStream:
        return self

    async def __anext__(self) -> RunEvent:
        try:
            return await self._events.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except httpx.RequestError as e:
            await self.aclose()
            raise BreadboardTransportError(f"{self._operation}: {e}") from e

    async def aclose(self) -> None:
        await self._events.aclose()
        await self._resp.aclose()

    async def __aenter__(self) -> AsyncRunEventStream:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


@dataclass(slots=True)
class BreadboardClient:
    """
    Main interface to a board server.
    Every call has a synchronous and an asynchronous (``a``-prefixed) version.

    Example:
        >>> client = BreadboardClient()  # BREADBOARD_SERVER_URL / BREADBOARD_API_KEY
        >>> events = client.run_board_and_collect(user="me", board="chat", data={"text": "hi"})
        >>> token = BreadboardClient.get_next_token(events)
        >>> more = client.run_board_and_collect(user="me", board="chat", next=token, data={"text": "again"})
    """
    base_url: str | None = None
    api_key: str | None = field(default=None, repr=False)
    timeout_s: float = DEFAULT_TIMEOUT_S
    flush_on_close: bool = False

    _http: BreadboardHttpClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        config = ClientConfig.from_env_or_value(self.base_url, self.api_key, timeout_s=self.timeout_s)
        self.base_url = config.base_url
        self._http = BreadboardHttpClient(config=config)

    def close(self) -> None:
        self._http.close()

    async def aclose(self) -> None:
        await self._http.aclose()

    def run_board(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
        next: str | None = None,
    ) -> RunEventStream:
        """
        Run a board (or resume it with ``next``) and stream its events.

        Returns:
            A RunEventStream. It owns the HTTP response and closes it when the
            events run out or when the stream is closed, even before the first
            event is read. Use it in a ``with`` block to stop early.

        Raises:
            BreadboardAPIError: The server answered with a non-2xx status.
            BreadboardTransportError: The server could not be reached.
        """
        req = _as_request(request, user, board, data, next)
        operation = "Failed to run board"
        resp = self._http.open_stream(
            _board_path(req.user, req.board, ".api/run"),
            req.run_payload(self._http.api_key),
            operation=operation,
        )
        return RunEventStream(resp, operation, flush_on_close=self.flush_on_close)

    async def arun_board(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
        next: str | None = None,
    ) -> AsyncRunEventStream:
        req = _as_request(request, user, board, data, next)
        operation = "Failed to run board"
        resp = await self._http.aopen_stream(
            _board_path(req.user, req.board, ".api/run"),
            req.run_payload(self._http.api_key),
            operation=operation,
        )
        return AsyncRunEventStream(resp, operation, flush_on_close=self.flush_on_close)

    def run_board_and_collect(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
        next: str | None = None,
    ) -> list[RunEvent]:
        """Run a board and wait for all of its events."""
        return collect_run_events(self.run_board(request, user=user, board=board, data=data, next=next))

    async def arun_board_and_collect(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
        next: str | None = None,
    ) -> list[RunEvent]:
        events = await self.arun_board(request, user=user, board=board, data=data, next=next)
        return await acollect_run_events(events)

    def invoke_board(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> RunEventStream:
        """One-shot board call: no continuation, the whole board runs with ``data``."""
        req = _as_request(request, user, board, data, None)
        operation = "Failed to invoke board"
        resp = self._http.open_stream(
            _board_path(req.user, req.board, ".api/invoke"),
            req.invoke_payload(self._http.api_key),
            operation=operation,
        )
        return RunEventStream(resp, operation, flush_on_close=self.flush_on_close)

    async def ainvoke_board(
        self,
        request: BoardRequest | None = None,
        *,
        user: str | None = None,
        board: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> AsyncRunEventStream:
        req = _as_request(request, user, board, data, None)
        operation = "Failed to invoke board"
        resp = await self._http.aopen_stream(
            _board_path(req.user, req.board, ".api/invoke"),
            req.invoke_payload(self._http.api_key),
            operation=operation,
        )
        return AsyncRunEventStream(resp, operation, flush_on_close=self.flush_on_close)

    # --------- Catalog ---------

    def list_boards(self) -> list[BoardListEntry]:
        resp = self._http.get("/boards", params={"API_KEY": self._http.api_key}, operation="Failed to list boards")
        return _BOARD_LIST.validate_python(resp.json())

    async def alist_boards(self) -> list[BoardListEntry]:
        resp = await self._http.aget(
            "/boards", params={"API_KEY": self._http.api_key}, operation="Failed to list boards"
        )
        return _BOARD_LIST.validate_python(resp.json())

    def get_board(self, user: str, board: str) -> GraphDescriptor:
        """Raw graph of a board."""
        resp = self._http.get(_board_path(user, board, ".json"), with_key=True, operation="Failed to get board")
        return GraphDescriptor.model_validate(resp.json())

    async def aget_board(self, user: str, board: str) -> GraphDescriptor:
        resp = await self._http.aget(
            _board_path(user, board, ".json"), with_key=True, operation="Failed to get board"
        )
        return GraphDescriptor.model_validate(resp.json())

    def describe_board(self, user: str, board: str) -> BoardDescribeResponse:
        """
        Input/output schemas and metadata of a board.

        ``user`` may carry a leading "@" and ``board`` may be a full path such as
        "@user/board.json".
        """
        user, board = _normalize_board_ref(user, board)
        resp = self._http.post_json(
            _board_path(user, board, ".api/describe"), with_key=True, operation="Failed to describe board"
        )
        return BoardDescribeResponse.model_validate(resp.json())

    async def adescribe_board(self, user: str, board: str) -> BoardDescribeResponse:
        user, board = _normalize_board_ref(user, board)
        resp = await self._http.apost_json(
            _board_path(user, board, ".api/describe"), with_key=True, operation="Failed to describe board"
        )
        return BoardDescribeResponse.model_validate(resp.json())

    # --------- Helpers ---------

    @staticmethod
    def get_next_token(events: Sequence[RunEvent]) -> str | None:
        """Token to resume the run with: the one of the latest input/output event."""
        return get_next_token(events)

    @staticmethod
    def collect_stream_events(events: Iterable[RunEvent]) -> list[RunEvent]:
        return collect_run_events(events)

    @staticmethod
    async def acollect_stream_events(events: AsyncIterable[RunEvent]) -> list[RunEvent]:
        return await acollect_run_events(events)
