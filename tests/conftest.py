import asyncio
import inspect
import json
from pathlib import Path

import pytest

STUBS_DIR = Path(__file__).parent / "stubs"


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test to run in event loop")


def pytest_pyfunc_call(pyfuncitem):
    if "asyncio" not in pyfuncitem.keywords:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        funcargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
        loop.run_until_complete(test_func(**funcargs))
    finally:
        loop.close()
        asyncio.set_event_loop(None)

    return True


@pytest.fixture
def stub_response() -> dict:
    return json.loads((STUBS_DIR / "cronitor_response.json").read_text(encoding="utf-8"))
