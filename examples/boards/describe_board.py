import json

import dotenv

from breadboard_client import BreadboardClient, get_required_env_var

dotenv.load_dotenv()

client = BreadboardClient()

for entry in client.list_boards():
    print(f"{entry.path:40} {entry.title}")

description = client.describe_board(get_required_env_var("BREADBOARD_USER"), get_required_env_var("BOARD_ID"))
print(json.dumps(description.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False, indent=2))

client.close()
