import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# The app reads DATABASE_URL at import time.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from hexdelve import create_app, db  # noqa: E402
from hexdelve.routes.world_api import clear_world_cache  # noqa: E402


class FakeRng:
    """Replays fixed randint results; choice/sample take the first items."""

    def __init__(self, ints=(), floats=()):
        self.ints = list(ints)
        self.floats = list(floats)

    def randint(self, lo, hi):
        v = self.ints.pop(0)
        assert lo <= v <= hi, f"{v} outside {lo}..{hi}"
        return v

    def random(self):
        return self.floats.pop(0) if self.floats else 0.99

    def choice(self, seq):
        return seq[0]

    def sample(self, seq, k):
        return list(seq)[:k]


@pytest.fixture()
def fake_rng():
    return FakeRng


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    # Keep HTTP tests fast: one depth below the overland is enough.
    app.config.update({"TESTING": True, "WORLD_DEPTH_COUNT": 1})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        db.session.remove()
        ctx.pop()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def fresh_world_cache():
    clear_world_cache()
    yield
    clear_world_cache()
