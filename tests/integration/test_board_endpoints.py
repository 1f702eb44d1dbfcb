import os

import pytest

from breadboard_client import BreadboardClient, is_error_event, is_input_or_output_event


def _board_ref() -> tuple[str, str]:
    user = os.getenv("BREADBOARD_USER")
    board = os.getenv("BOARD_ID")
    if not user or not board:
        pytest.skip("BREADBOARD_USER / BOARD_ID not set")
    return user, board


@pytest.mark.integration
def test_list_boards() -> None:
    client = BreadboardClient()
    try:
        boards = client.list_boards()
    finally:
        client.close()

    assert isinstance(boards, list)
    if boards:
        assert boards[0].title
        assert boards[0].path


@pytest.mark.integration
def test_describe_board() -> None:
    user, board = _board_ref()
    client = BreadboardClient()
    try:
        description = client.describe_board(user, board)
    finally:
        client.close()

    assert description.input_schema is not None


@pytest.mark.integration
def test_run_board_returns_resumable_events() -> None:
    user, board = _board_ref()
    client = BreadboardClient()
    try:
        events = client.run_board_and_collect(user=user, board=board)
    finally:
        client.close()

    assert events
    for event in events:
        assert is_input_or_output_event(event) or is_error_event(event)
    if not any(is_error_event(e) for e in events):
        assert BreadboardClient.get_next_token(events) is not None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_arun_board() -> None:
    user, board = _board_ref()
    client = BreadboardClient()
    try:
        stream = await client.arun_board(user=user, board=board)
        events = await BreadboardClient.acollect_stream_events(stream)
    finally:
        await client.aclose()

    assert events
