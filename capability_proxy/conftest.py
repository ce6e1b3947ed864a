import pytest
from fastapi import FastAPI

from capability_proxy.capability.proxy import CapabilityProxy
from capability_proxy.capability.route import router as capability_router
from capability_proxy.utils_tests.backend_mock import (
    TEST_BACKEND_URL,
    RecordingBackend,
)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def make_proxy():
    def _make(backend: RecordingBackend, backend_url: str = TEST_BACKEND_URL):
        return CapabilityProxy(backend_url, backend.client(), timeout=5)

    return _make


@pytest.fixture
def make_app(make_proxy):
    """A bare app carrying only the capability routes and an injected proxy."""

    def _make(backend: RecordingBackend, backend_url: str = TEST_BACKEND_URL):
        app = FastAPI()
        app.include_router(capability_router)
        app.state.capability_proxy = make_proxy(backend, backend_url)
        return app

    return _make
