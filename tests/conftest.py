import pytest


@pytest.fixture
def anyio_backend():
    # The runtime is built on asyncio (asyncio.create_task etc.).
    return "asyncio"
