from __future__ import annotations

from breadboard_client.client import AsyncRunEventStream, BreadboardClient, RunEventStream
from breadboard_client._config import ClientConfig, get_required_env_var
from breadboard_client._errors import BreadboardAPIError, BreadboardError, BreadboardTransportError
from breadboard_client._sse import ChunkReassembler, strip_data_prefix
from breadboard_client._stream import (
    acollect_run_events,
    adecode_run_events,
    collect_run_events,
    decode_run_events,
    get_next_token,
)
from breadboard_client.events import (
    EVENT_TYPES,
    RunErrorEvent,
    RunEvent,
    RunInputEvent,
    RunOutputEvent,
    decode_run_event,
    is_error_event,
    is_input_event,
    is_input_or_output_event,
    is_output_event,
    process_run_event,
    to_wire,
)
from breadboard_client.types import (
    BoardDescribeResponse,
    BoardListEntry,
    BoardRequest,
    EdgeDescriptor,
    GraphDescriptor,
    NodeDescriptor,
    Schema,
)

__all__ = [
    "AsyncRunEventStream",
    "BoardDescribeResponse",
    "BoardListEntry",
    "BoardRequest",
    "BreadboardAPIError",
    "BreadboardClient",
    "BreadboardError",
    "BreadboardTransportError",
    "ChunkReassembler",
    "ClientConfig",
    "EVENT_TYPES",
    "EdgeDescriptor",
    "GraphDescriptor",
    "NodeDescriptor",
    "RunErrorEvent",
    "RunEvent",
    "RunInputEvent",
    "RunEventStream",
    "RunOutputEvent",
    "Schema",
    "acollect_run_events",
    "adecode_run_events",
    "collect_run_events",
    "decode_run_event",
    "decode_run_events",
    "get_next_token",
    "get_required_env_var",
    "is_error_event",
    "is_input_event",
    "is_input_or_output_event",
    "is_output_event",
    "process_run_event",
    "strip_data_prefix",
    "to_wire",
]

__version__ = "1.0.0"
