import os
import sys

import pytest

# Enable slot guards in tests unless explicitly overridden.
os.environ.setdefault("CONS_TEST_GUARDS", "1")

import jax

# Ensure src/ is importable when pytest runs without an editable install.
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

_MARKER_DESCRIPTIONS = {
    "stress": "builds and tears down lists of 100k+ nodes",
}


def pytest_addoption(parser):
    parser.addoption(
        "--skip-stress",
        action="store_true",
        default=os.environ.get("CONS_SKIP_STRESS", "").strip().lower()
        in ("1", "true", "yes", "on"),
        help="deselect tests marked stress",
    )


def pytest_configure(config):
    for name, desc in _MARKER_DESCRIPTIONS.items():
        config.addinivalue_line("markers", f"{name}: {desc}")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--skip-stress"):
        return
    deselected = [item for item in items if item.get_closest_marker("stress")]
    if deselected:
        config.hook.pytest_deselected(items=deselected)
        for item in deselected:
            items.remove(item)


@pytest.fixture(autouse=True)
def _set_default_device():
    # Arena audits run on host arrays; keep them off any accelerator.
    with jax.default_device(jax.devices("cpu")[0]):
        yield


@pytest.fixture
def arena():
    import conslist as cl

    return cl.NodeArena(cl.ArenaConfig(initial_capacity=8))
