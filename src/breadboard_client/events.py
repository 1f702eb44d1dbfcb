"""
Run events reported by a board server while a board runs.

On the wire every event is a JSON array whose first element names the event:

    ["input",  {"node": {"id": ...}, "inputArguments": {"schema": {...}}}, next]
    ["output", {"node": {"id": ...}, "outputs": {...}}, next]
    ["error",  message]

The three variants below are real tuples with the same layout, so ``event[0]``,
``event[2]`` and ``len(event)`` behave exactly like the wire arrays.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

EVENT_TYPES: tuple[str, ...] = ("input", "output", "error")


class RunInputEvent(NamedTuple):
    """The board paused and waits for the data described by ``inputArguments.schema``."""

    type: Literal["input"]
    data: dict[str, Any]
    next: Optional[str] = None

    @property
    def node_id(self) -> str:
        return self.data["node"]["id"]

    @property
    def schema(self) -> dict[str, Any]:
        return self.data["inputArguments"]["schema"]


class RunOutputEvent(NamedTuple):
    """A node produced ``outputs``."""

    type: Literal["output"]
    data: dict[str, Any]
    next: Optional[str] = None

    @property
    def node_id(self) -> str:
        return self.data["node"]["id"]

    @property
    def outputs(self) -> dict[str, Any]:
        return self.data["outputs"]


class RunErrorEvent(NamedTuple):
    """The run failed, or a record of the stream could not be decoded. Carries no token."""

    type: Literal["error"]
    message: str


RunEvent = Union[RunInputEvent, RunOutputEvent, RunErrorEvent]


def is_input_event(event: RunEvent) -> bool:
    return isinstance(event, RunInputEvent)


def is_output_event(event: RunEvent) -> bool:
    return isinstance(event, RunOutputEvent)


def is_error_event(event: RunEvent) -> bool:
    return isinstance(event, RunErrorEvent)


def is_input_or_output_event(event: RunEvent) -> bool:
    return is_input_event(event) or is_output_event(event)


def process_run_event(event: RunInputEvent | RunOutputEvent) -> dict[str, Any]:
    """Split an input/output event into its payload and continuation token."""
    if not is_input_or_output_event(event):
        raise TypeError(f"Expected an input or output event, got {event[0]!r}")
    return {"event": event.data, "next": event.next}


def to_wire(event: RunEvent) -> list[Any]:
    """JSON-ready array form of an event, as the server sends it."""
    if isinstance(event, RunErrorEvent):
        return [event.type, event.message]
    if isinstance(event, (RunInputEvent, RunOutputEvent)):
        wire: list[Any] = [event.type, event.data]
        if event.next is not None:
            wire.append(event.next)
        return wire
    raise TypeError(f"Not a run event: {event!r}")


# ---------------------------------------------------------------------------
# Payload shape checks (required-field presence only)
# ---------------------------------------------------------------------------

NonEmptyStr = Annotated[str, Field(min_length=1)]


class _NodeRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: NonEmptyStr


class _InputArguments(BaseModel):
    model_config = ConfigDict(extra="allow")

    schema_: dict[str, Any] = Field(alias="schema")


class InputEventPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    node: _NodeRef
    input_arguments: _InputArguments = Field(alias="inputArguments")


class OutputEventPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    node: _NodeRef
    outputs: dict[str, Any]


_PAYLOAD_MODELS: dict[str, type[BaseModel]] = {
    "input": InputEventPayload,
    "output": OutputEventPayload,
}


def _error_locations(exc: ValidationError) -> str:
    locs: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        if loc not in locs:
            locs.append(loc)
    return ", ".join(locs)


def _error(message: str) -> RunErrorEvent:
    return RunErrorEvent("error", message)


def decode_run_event(record: str | None) -> RunEvent | None:
    """
    Decode one complete record into a run event.

    Never raises: records that are not valid JSON, not an array of at least two
    elements, not a known event type, or an input/output event missing its
    required fields or carrying a non-string token come back as a RunErrorEvent
    describing the problem.

    Args:
        record: One record, with or without its trailing blank line.

    Returns:
        The decoded event, or None for a blank record.
    """
    if not record or not record.strip():
        return None

    try:
        parsed = json.loads(record.strip())
    except (ValueError, RecursionError) as e:
        return _error(f"Failed to parse event: {e}")

    if not isinstance(parsed, list) or len(parsed) < 2:
        return _error("Invalid event format: expected array with at least 2 elements")

    event_type, payload = parsed[0], parsed[1]

    if not isinstance(event_type, str) or event_type not in EVENT_TYPES:
        shown = event_type if isinstance(event_type, str) else json.dumps(event_type)
        return _error(f"Invalid event type: {shown}")

    if event_type == "error":
        message = payload if isinstance(payload, str) else json.dumps(payload)
        return RunErrorEvent("error", message)

    try:
        _PAYLOAD_MODELS[event_type].model_validate(payload)
    except ValidationError as e:
        return _error(f"Invalid {event_type} event: missing required fields ({_error_locations(e)})")

    token = parsed[2] if len(parsed) > 2 else None
    if token is not None and not isinstance(token, str):
        return _error(
            f"Invalid {event_type} event: continuation token must be a string, got {json.dumps(token)}"
        )

    if event_type == "input":
        return RunInputEvent("input", payload, token)
    return RunOutputEvent("output", payload, token)
