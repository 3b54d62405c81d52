import asyncio
import logging
import os
import time
from pathlib import Path
from typing import List, Optional

import pytest

from zsh_ai_suggestions.config import Settings, load_settings
from zsh_ai_suggestions.log import PACKAGE_LOGGER


class FakeSuggester:
    """In-memory suggester recording every call."""

    def __init__(self, reply: Optional[str] = None, delay: float = 0.0,
                 error: Optional[Exception] = None):
        self.reply = reply
        self.delay = delay
        self.error = error
        self.calls: List[str] = []
        self.completed = 0

    async def suggest(self, text: str) -> str:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.completed += 1
        if self.reply is not None:
            return self.reply
        # "git chec" -> "git checkout main"
        return f"{text}kout main"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env out of the tests."""
    for key in list(os.environ):
        if key.startswith("ZSH_AI_SUGGESTIONS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("SERVER_PORT", raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def shared_dir(tmp_path) -> Path:
    d = tmp_path / "zsh-ai-suggestions"
    d.mkdir()
    return d


@pytest.fixture
def settings(shared_dir) -> Settings:
    return load_settings(
        tmpdir=shared_dir,
        cleanup_on_exit=False,
        settle_delay=0.01,
        request_timeout=2.0,
    )


async def wait_until(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` on the event loop until it holds or time runs out."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()
