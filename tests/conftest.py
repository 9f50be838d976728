"""Shared test fixtures for gddforge."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from gddforge.config.models import GDDForgeConfig
from gddforge.drafter.models import GameContext
from gddforge.llm.base import LLMProvider
from gddforge.llm.models import LLMConfig
from gddforge.llm.registry import ModelRegistry
from gddforge.store.sqlite_store import SQLiteSectionStore

FAKE_CHUNKS = ["Generated ", "section ", "content."]


def make_fake_provider(chunks=None, error: Exception | None = None, fail_after: int = 0):
    """A MagicMock LLMProvider whose stream yields chunks, optionally raising."""
    chunks = FAKE_CHUNKS if chunks is None else chunks
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(provider="anthropic", model="test-model")

    async def _fake_stream(*args, **kwargs):
        for i, chunk in enumerate(chunks):
            if error is not None and i == fail_after:
                raise error
            yield chunk
        if error is not None and fail_after >= len(chunks):
            raise error

    provider.generate_stream = MagicMock(side_effect=_fake_stream)
    return provider


class FakeClock:
    """Injectable sleep: timers only fire when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._waiters: list[tuple[float, asyncio.Future]] = []

    async def sleep(self, delay: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        entry = (self.now + delay, fut)
        self._waiters.append(entry)
        try:
            await fut
        finally:
            if entry in self._waiters:
                self._waiters.remove(entry)

    @property
    def pending(self) -> int:
        return sum(1 for _, fut in self._waiters if not fut.done())

    async def advance(self, seconds: float) -> None:
        await settle()
        self.now += seconds
        for deadline, fut in list(self._waiters):
            if deadline <= self.now and not fut.done():
                fut.set_result(None)
        await settle()


async def settle(rounds: int = 20) -> None:
    """Let scheduled tasks and worker-thread store calls finish."""
    for _ in range(rounds):
        await asyncio.sleep(0.005)


@pytest.fixture
def game_context():
    return GameContext(
        name="Starfall Tactics",
        concept="A turn-based space strategy game about rebuilding a lost fleet.",
        platforms=("PC", "Switch"),
        timeline="18 months",
    )


@pytest.fixture
def empty_game_context():
    return GameContext()


@pytest.fixture
def sample_all_content():
    return {
        "overview": {
            "brief_introduction": "<p>Starfall Tactics is a tactical fleet game.</p>",
            "target_audience": "<p>Strategy fans aged 16-35 on PC and handheld.</p>",
        },
        "storyline": {
            "background_story": "<p>The armada vanished at the edge of the nebula.</p>",
        },
    }


@pytest.fixture
def env():
    return {"ANTHROPIC_API_KEY": "sk-ant-test", "OPENAI_API_KEY": "sk-openai-test"}


@pytest.fixture
def registry(env):
    return ModelRegistry(environ=env)


@pytest.fixture
def fake_provider():
    return make_fake_provider()


@pytest.fixture
def provider_factory(fake_provider):
    factory = MagicMock(return_value=fake_provider)
    return factory


@pytest.fixture
def sample_config(tmp_path):
    cfg = GDDForgeConfig()
    cfg.storage.db_path = str(tmp_path / "gdd.db")
    return cfg


@pytest.fixture
def store(tmp_path):
    s = SQLiteSectionStore(db_path=str(tmp_path / "gdd.db"))
    yield s
    s.close()


@pytest.fixture
def clock():
    return FakeClock()
