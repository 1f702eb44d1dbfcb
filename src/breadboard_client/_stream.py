from __future__ import annotations

import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, Sequence

from breadboard_client._sse import ChunkReassembler, strip_data_prefix
from breadboard_client.events import RunEvent, RunInputEvent, RunOutputEvent, decode_run_event

logger = logging.getLogger(__name__)


def _decode_records(records: Iterable[str]) -> Iterator[RunEvent]:
    for record in records:
        payload = strip_data_prefix(record)
        if payload is None:
            continue
        event = decode_run_event(payload)
        if event is not None:
            yield event


def _close_stream(reassembler: ChunkReassembler, flush_on_close: bool) -> list[str]:
    dangling = reassembler.flush()
    if dangling is None:
        return []
    if flush_on_close:
        logger.debug("Flushing partial record left at end of stream (%d chars)", len(dangling))
        return [dangling]
    logger.warning("Dropping partial record left at end of stream: %r", dangling)
    return []


def decode_run_events(fragments: Iterable[str], *, flush_on_close: bool = False) -> Iterator[RunEvent]:
    """
    Decode a board server event stream.

    Fragments are reassembled into complete records, stripped of their
    ``data: `` prefix and decoded one by one. A record that cannot be decoded
    yields a RunErrorEvent and the stream carries on.

    Args:
        fragments: Text chunks in arrival order (e.g. ``httpx.Response.iter_text()``).
        flush_on_close: Decode a partial record left without its final blank
            line when the source ends, instead of dropping it.

    Yields:
        Run events in arrival order.
    """
    reassembler = ChunkReassembler()
    for fragment in fragments:
        yield from _decode_records(reassembler.feed(fragment))
    yield from _decode_records(_close_stream(reassembler, flush_on_close))


async def adecode_run_events(
    fragments: AsyncIterable[str], *, flush_on_close: bool = False
) -> AsyncIterator[RunEvent]:
    """Async version of decode_run_events() (e.g. over ``httpx.Response.aiter_text()``)."""
    reassembler = ChunkReassembler()
    async for fragment in fragments:
        for event in _decode_records(reassembler.feed(fragment)):
            yield event
    for event in _decode_records(_close_stream(reassembler, flush_on_close)):
        yield event


def collect_run_events(events: Iterable[RunEvent]) -> list[RunEvent]:
    """Drain an event stream into a list, keeping arrival order."""
    return list(events)


async def acollect_run_events(events: AsyncIterable[RunEvent]) -> list[RunEvent]:
    """Drain an async event stream into a list, keeping arrival order."""
    collected: list[RunEvent] = []
    async for event in events:
        collected.append(event)
    return collected


def get_next_token(events: Sequence[RunEvent]) -> str | None:
    """
    Continuation token of the most recent input/output event.

    Error events never carry a token. Returns None when no input/output event
    with a token is found.
    """
    for event in reversed(events):
        if isinstance(event, (RunInputEvent, RunOutputEvent)) and event.next is not None:
            return event.next
    return None
