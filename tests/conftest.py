import pytest

from enumkit import config
from enumkit.backend.resolver import get_table

BACKEND_NAMES = ["python", "native"]


@pytest.fixture(params=BACKEND_NAMES)
def backend(request):
    """Run the test once per width primitives backend."""
    return request.param


@pytest.fixture
def ops(backend):
    """The width primitives table of the current backend, keyed by IntKind."""
    return get_table(backend)


@pytest.fixture(autouse=True)
def _fresh_options(monkeypatch):
    monkeypatch.delenv("ENUMKIT_BACKEND", raising=False)
    monkeypatch.delenv("ENUMKIT_OPT_LEVEL", raising=False)
    config.reset()
    yield
    config.reset()
