import dotenv

from breadboard_client import (
    BreadboardAPIError,
    BreadboardClient,
    RunErrorEvent,
    RunInputEvent,
    RunOutputEvent,
    get_required_env_var,
)

dotenv.load_dotenv()

user = get_required_env_var("BREADBOARD_USER")
board = get_required_env_var("BOARD_ID")

client = BreadboardClient()

try:
    # First step: run until the board asks for input.
    events = client.run_board_and_collect(user=user, board=board)
    for event in events:
        if isinstance(event, RunInputEvent):
            print(f"input  <- {event.node_id}: {event.schema}")
        elif isinstance(event, RunOutputEvent):
            print(f"output -> {event.node_id}: {event.outputs}")
        elif isinstance(event, RunErrorEvent):
            print(f"error: {event.message}")

    # Second step: resume with the token of the last input/output event.
    token = BreadboardClient.get_next_token(events)
    if token:
        for event in client.run_board(user=user, board=board, next=token, data={"text": "Hello"}):
            print(event[0], event[1])
except BreadboardAPIError as e:
    if e.is_auth_error:
        print("Check your BREADBOARD_API_KEY.")
    elif e.is_not_found:
        print(f"No board @{user}/{board} on this server.")
    else:
        print(e.to_dict())
finally:
    client.close()
