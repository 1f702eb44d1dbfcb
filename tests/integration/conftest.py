import os

import pytest
from dotenv import find_dotenv, load_dotenv

# Load .env as early as possible (before pytest_collection_modifyitems)
load_dotenv(find_dotenv(usecwd=True))


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    configured = os.getenv("BREADBOARD_SERVER_URL") and os.getenv("BREADBOARD_API_KEY")
    for item in items:
        if "integration" in item.keywords and not configured:
            item.add_marker(
                pytest.mark.skip(reason="BREADBOARD_SERVER_URL / BREADBOARD_API_KEY missing from environment/.env")
            )
