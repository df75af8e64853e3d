"""
Pytest configuration and fixtures for reactive-config tests.
"""

import asyncio
import time
from pathlib import Path
from typing import Callable

import pytest

from reactive_config.models import StoreOptions, WatchOptions


async def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.05) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    """Async polling helper for watcher tests."""
    return _wait_until


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Path of a configuration file that does not exist yet."""
    return tmp_path / "settings.json"


@pytest.fixture
def fast_options() -> StoreOptions:
    """Store options with short watcher timings."""
    return StoreOptions(watch=WatchOptions(stability_threshold_ms=100, poll_interval_ms=20, join_timeout_s=2.0))


@pytest.fixture
def commented_config() -> str:
    """A formatted JSONC document with leading and trailing comments."""
    return (
        "{\n"
        "    // Server settings\n"
        "    \"host\": \"localhost\", // where to bind\n"
        "    \"port\": 8080,\n"
        "\n"
        "    /* limits */\n"
        "    \"limits\": {\n"
        "        \"connections\": 10\n"
        "    }\n"
        "}\n"
    )


@pytest.fixture
def language_dir(tmp_path: Path) -> Path:
    """Directory with two language files and some entries to be skipped."""
    directory = tmp_path / "lang"
    directory.mkdir()
    (directory / "en.json").write_text('{\n    "greeting": "Hi, {0}!",\n    "empty": ""\n}\n')
    (directory / "fr.json").write_text('{\n    // French\n    "greeting": "Salut, {0} !"\n}\n')
    (directory / "de.json_old").write_text("{broken")
    (directory / "notes.txt").write_text("not a language")
    (directory / "nested.json").mkdir()
    return directory
