import os
import sys

import pytest

# Enable every extent guard in tests unless explicitly overridden.
os.environ.setdefault("GENZ_TEST_GUARDS", "1")

import jax

# Ensure src/ is importable when pytest runs without an editable install.
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
for path in (ROOT, SRC):
    if path not in sys.path:
        sys.path.insert(0, path)

_MARKER_DESCRIPTIONS = {
    "extent": "extent authority and scope tokens",
    "mint": "marker minting and brand checks",
    "prover": "distinctness prover and type tuples",
    "storable": "storable bridge and bounded access",
    "arena": "jax arenas branded by markers",
    "backend_matrix": "run the test on cpu and gpu (when available) in one session",
}


def pytest_configure(config):
    for name, desc in _MARKER_DESCRIPTIONS.items():
        config.addinivalue_line("markers", f"{name}: {desc}")


def _backend_matrix_backends():
    backends = ["cpu"]
    try:
        gpu_devices = jax.devices("gpu")
    except Exception:
        gpu_devices = []
    if gpu_devices:
        backends.append("gpu")
    return backends


def pytest_generate_tests(metafunc):
    marker = metafunc.definition.get_closest_marker("backend_matrix")
    if marker and "backend_device" in metafunc.fixturenames:
        backends = _backend_matrix_backends()
        ids = [f"{backend}-backend" for backend in backends]
        metafunc.parametrize("backend_device", backends, ids=ids, indirect=True)


@pytest.fixture
def backend_device(request):
    backend = getattr(request, "param", None)
    if backend is None:
        yield None
        return
    device = jax.devices(backend)[0]
    with jax.default_device(device):
        yield device
