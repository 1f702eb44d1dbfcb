import json

import pytest

from breadboard_client.events import (
    EVENT_TYPES,
    RunErrorEvent,
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

INPUT_PAYLOAD = {"node": {"id": "n1"}, "inputArguments": {"schema": {"type": "object"}}}
OUTPUT_PAYLOAD = {
    "node": {"id": "n2", "configuration": {"schema": {"type": "object"}}},
    "outputs": {"text": "hello"},
}


def record(value) -> str:
    return json.dumps(value) + "\n\n"


def test_decode_valid_input_event():
    event = decode_run_event(record(["input", INPUT_PAYLOAD, "next-token"]))

    assert isinstance(event, RunInputEvent)
    assert event[0] == "input"
    assert event[2] == "next-token"
    assert event.next == "next-token"
    assert event.node_id == "n1"
    assert event.schema == {"type": "object"}
    assert event.data == INPUT_PAYLOAD


def test_decode_valid_output_event():
    event = decode_run_event(record(["output", OUTPUT_PAYLOAD, "tok2"]))

    assert isinstance(event, RunOutputEvent)
    assert event.node_id == "n2"
    assert event.outputs == {"text": "hello"}
    assert event.next == "tok2"


def test_output_event_without_configuration_is_valid():
    event = decode_run_event(record(["output", {"node": {"id": "n"}, "outputs": {}}, "t"]))

    assert isinstance(event, RunOutputEvent)


def test_decode_valid_error_event():
    event = decode_run_event(record(["error", "test error"]))

    assert event == ("error", "test error")
    assert isinstance(event, RunErrorEvent)
    assert len(event) == 2


def test_error_event_never_carries_a_token():
    event = decode_run_event(record(["error", "boom", "unexpected-token"]))

    assert event == ("error", "boom")
    assert len(event) == 2


def test_error_event_with_structured_message():
    event = decode_run_event(record(["error", {"message": "bad"}]))

    assert is_error_event(event)
    assert json.loads(event.message) == {"message": "bad"}


def test_input_event_without_token():
    event = decode_run_event(record(["input", INPUT_PAYLOAD]))

    assert isinstance(event, RunInputEvent)
    assert event.next is None


@pytest.mark.parametrize("token", [42, {"t": 1}, ["t"], True])
def test_non_string_token_is_rejected(token):
    event = decode_run_event(record(["output", OUTPUT_PAYLOAD, token]))

    assert is_error_event(event)
    assert event.message == (
        f"Invalid output event: continuation token must be a string, got {json.dumps(token)}"
    )


def test_null_token_means_no_token():
    event = decode_run_event(record(["input", INPUT_PAYLOAD, None]))

    assert isinstance(event, RunInputEvent)
    assert event.next is None


def test_unknown_fields_are_kept():
    payload = {**INPUT_PAYLOAD, "path": [1, 2], "timestamp": 12.5}

    event = decode_run_event(record(["input", payload, "t"]))

    assert event.data["timestamp"] == 12.5


@pytest.mark.parametrize("blank", ["", "   ", "\n\n", None])
def test_blank_record_yields_nothing(blank):
    assert decode_run_event(blank) is None


@pytest.mark.parametrize("bad", ["invalid json", "{not json}", '["input", ', "broken-json-continues\n\n"])
def test_invalid_json_becomes_error_event(bad):
    event = decode_run_event(bad)

    assert isinstance(event, RunErrorEvent)
    assert event.message.startswith("Failed to parse event: ")


@pytest.mark.parametrize("value", [{"type": "input"}, [], ["input"], "just a string", 42, None])
def test_non_array_or_short_array_is_invalid_format(value):
    event = decode_run_event(record(value))

    assert event == ("error", "Invalid event format: expected array with at least 2 elements")


def test_unknown_event_type():
    event = decode_run_event(record(["unknown", {}]))

    assert event == ("error", "Invalid event type: unknown")


def test_non_string_event_type():
    event = decode_run_event(record([["input"], {}]))

    assert is_error_event(event)
    assert event.message == 'Invalid event type: ["input"]'


@pytest.mark.parametrize("event_type, shown", [(None, "null"), (True, "true"), (7, "7")])
def test_non_string_event_type_is_shown_as_json(event_type, shown):
    event = decode_run_event(record([event_type, {}]))

    assert event == ("error", f"Invalid event type: {shown}")


@pytest.mark.parametrize(
    "payload, missing",
    [
        ({"inputArguments": {"schema": {}}}, "node"),
        ({"node": {}, "inputArguments": {"schema": {}}}, "node.id"),
        ({"node": {"id": ""}, "inputArguments": {"schema": {}}}, "node.id"),
        ({"node": {"id": "n"}}, "inputArguments"),
        ({"node": {"id": "n"}, "inputArguments": {}}, "inputArguments.schema"),
        ("not an object", "payload"),
    ],
)
def test_input_event_missing_required_fields(payload, missing):
    event = decode_run_event(record(["input", payload, "t"]))

    assert is_error_event(event)
    assert event.message.startswith("Invalid input event: missing required fields")
    assert missing in event.message


@pytest.mark.parametrize(
    "payload, missing",
    [
        ({"outputs": {}}, "node"),
        ({"node": {"id": "n"}}, "outputs"),
        ({"node": {"name": "n"}, "outputs": {}}, "node.id"),
    ],
)
def test_output_event_missing_required_fields(payload, missing):
    event = decode_run_event(record(["output", payload, "t"]))

    assert is_error_event(event)
    assert event.message.startswith("Invalid output event: missing required fields")
    assert missing in event.message


def test_decoder_never_raises_on_garbage():
    for garbage in ["\x00", "[", "]]", "null", "true", "[1,2]", '["error"]']:
        event = decode_run_event(garbage)
        assert event is None or is_error_event(event)


def test_predicates():
    i = RunInputEvent("input", INPUT_PAYLOAD, "a")
    o = RunOutputEvent("output", OUTPUT_PAYLOAD, "b")
    e = RunErrorEvent("error", "c")

    assert is_input_event(i) and not is_input_event(o)
    assert is_output_event(o) and not is_output_event(e)
    assert is_error_event(e) and not is_error_event(i)
    assert is_input_or_output_event(i) and is_input_or_output_event(o)
    assert not is_input_or_output_event(e)
    assert EVENT_TYPES == ("input", "output", "error")


def test_process_run_event():
    out = process_run_event(RunOutputEvent("output", OUTPUT_PAYLOAD, "tok"))

    assert out == {"event": OUTPUT_PAYLOAD, "next": "tok"}


def test_process_run_event_rejects_error_events():
    with pytest.raises(TypeError):
        process_run_event(RunErrorEvent("error", "x"))


def test_to_wire():
    assert to_wire(RunInputEvent("input", INPUT_PAYLOAD, "t")) == ["input", INPUT_PAYLOAD, "t"]
    assert to_wire(RunOutputEvent("output", OUTPUT_PAYLOAD)) == ["output", OUTPUT_PAYLOAD]
    assert to_wire(RunErrorEvent("error", "x")) == ["error", "x"]
