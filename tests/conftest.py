from collections.abc import Iterator

import pytest

from storefront.util.log import Log, LogFormat, LogLevel
from tests.helpers import base_env


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=False, file=False)
    try:
        yield
    finally:
        Log.close()
        Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=False, file=False)


@pytest.fixture
def env() -> dict[str, str]:
    return base_env()
