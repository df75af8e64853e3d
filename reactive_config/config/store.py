"""
File-backed reactive configuration store.

A ConfigStore keeps a JSON value in memory and a JSONC file on disk in sync:
- load() reads the file, merges it over the defaults and rewrites it
- writes through get() patch the cached text and persist it
- an optional watcher reloads the value when another process edits the file

Until load() and after unload() the store is detached: writes change memory
only and nothing is saved.

The text cache keeps the file's comments and layout; the value is what
callers read and write.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Set, Tuple, Union

from ..errors import IllegalArgumentError, JsoncSyntaxError
from ..jsonc.editor import REMOVE, serialize, set_value
from ..jsonc.formatter import format_text
from ..jsonc.parser import AccessPath, parse
from ..models import StoreOptions
from .file_watcher import FileEvent, FileEventKind, FileWatcher
from .merger import ConfigMerger
from .proxy import ConfigProxy, ListProxy

logger = logging.getLogger(__name__)


class ConfigStore:
    """Reactive configuration value bound to one JSONC file."""

    def __init__(
        self,
        path: Union[str, Path],
        default: Any,
        watch_file: bool = False,
        options: Optional[StoreOptions] = None
    ):
        """
        Initialize configuration store. No I/O happens until init().

        Args:
            path: JSONC file backing the store
            default: Template value (a JSON object or array)
            watch_file: Reload automatically when the file changes on disk
            options: Formatting, watcher and quarantine settings

        Raises:
            IllegalArgumentError: If ``default`` is not a JSON object or array
        """
        if not isinstance(default, (dict, list)):
            raise IllegalArgumentError(default, "default must be a JSON object or array")
        try:
            self._default = json.loads(json.dumps(default, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise IllegalArgumentError(default, f"default is not representable as JSON ({e})") from e

        self.path = Path(path)
        self.watch_file = watch_file
        self.options = options or StoreOptions()

        self._value: Any = copy.deepcopy(self._default)
        self._text = ""
        self._last_save_time = -1.0
        self._reassigning = False
        self._loaded = False
        self._watcher: Optional[FileWatcher] = None
        self._lock = asyncio.Lock()
        self._pending_saves: Set[asyncio.Task] = set()
        self._merger = ConfigMerger()

    @classmethod
    async def create(
        cls,
        path: Union[str, Path],
        default: Any,
        watch_file: bool = False,
        options: Optional[StoreOptions] = None
    ) -> "ConfigStore":
        """Construct a store and run init()."""
        store = cls(path, default, watch_file, options)
        await store.init()
        return store

    async def __aenter__(self) -> "ConfigStore":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unload()

    # Properties

    @property
    def text(self) -> str:
        """Cached file text, comments included."""
        return self._text

    @property
    def last_save_time(self) -> float:
        """mtime of the file right after the last save, or -1.0."""
        return self._last_save_time

    @property
    def is_loaded(self) -> bool:
        """True between a successful load and unload()."""
        return self._loaded

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_running()

    @property
    def default(self) -> Any:
        """Copy of the template value."""
        return copy.deepcopy(self._default)

    def get(self) -> Union[ConfigProxy, ListProxy]:
        """Live view of the value; writes through it are persisted."""
        if isinstance(self._value, dict):
            return ConfigProxy(self, ())
        return ListProxy(self, ())

    def snapshot(self) -> Any:
        """Deep copy of the current value as plain data."""
        return copy.deepcopy(self._value)

    # Lifecycle

    async def init(self) -> None:
        """Load the file, then start watching it if requested (only once)."""
        await self.load()
        if self.watch_file and self._watcher is None:
            self._watcher = FileWatcher(self.path, self._on_file_event, self.options.watch)
            await self._watcher.start()

    async def load(self) -> None:
        """
        Read the file, merge it over the defaults and save the result.

        A file that does not parse is renamed aside and the defaults are used.

        Raises:
            OSError: If the file cannot be read or written
        """
        async with self._lock:
            await self._load_locked()

    async def save(self, indentation: Optional[int] = None) -> None:
        """
        Format the text cache and write it to the file.

        Does nothing while the store is not loaded, so an unloaded store never
        overwrites the file with its defaults.

        Args:
            indentation: Spaces per level (defaults to the formatting options)

        Raises:
            OSError: If the file cannot be written
        """
        async with self._lock:
            if not self._loaded:
                logger.debug(f"Skipping save of {self.path}: not loaded")
                return
            text = self._render(indentation)
            self._last_save_time = await asyncio.to_thread(self._write_text, text)
            logger.debug(f"Saved {self.path} (mtime {self._last_save_time})")

    async def flush(self) -> None:
        """Wait for saves scheduled by writes through get()."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    async def unload(self) -> None:
        """Stop watching, wait for pending saves and reset to the defaults."""
        if self._watcher is not None:
            watcher, self._watcher = self._watcher, None
            await watcher.close()
        await self.flush()

        async with self._lock:
            self._loaded = False
            self._value = copy.deepcopy(self._default)
            self._text = ""
        logger.debug(f"Unloaded {self.path}")

    async def reload(self) -> None:
        """Unload, then init again."""
        await self.unload()
        await self.init()

    # Loading

    async def _load_locked(self) -> None:
        text, loaded = await asyncio.to_thread(self._read_file)

        if loaded is None:
            merged = copy.deepcopy(self._default)
        else:
            merged = self._merger.merge(self._default, loaded)

        with self._reassignment():
            self._text = self._sync_text(text, merged)
            self._assign(merged)
        self._loaded = True

        self._last_save_time = await asyncio.to_thread(self._write_text, self._render(None))
        logger.debug(f"Loaded {self.path}")

    def _read_file(self) -> Tuple[str, Any]:
        """
        Read and parse the backing file.

        Returns:
            (text to keep, parsed value or None when the defaults apply)
        """
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
            logger.info(f"Created {self.path}")
            return "", None

        try:
            text = self.path.read_text(encoding=self.options.encoding)
        except UnicodeDecodeError as e:
            logger.warning(f"{self.path}: not valid {self.options.encoding} at byte {e.start} ({e.reason})")
            self._quarantine()
            return "", None

        try:
            loaded = parse(text, allow_empty_content=True, file_path=str(self.path))
        except JsoncSyntaxError as e:
            for diagnostic in e.diagnostics:
                logger.warning(
                    f"{self.path}:{diagnostic.line}:{diagnostic.column}: "
                    f"{diagnostic.code.label} (error {int(diagnostic.code)})"
                )
            self._quarantine()
            return "", None

        if loaded is not None and type(loaded) is not type(self._default):
            logger.warning(
                f"{self.path} holds a JSON {type(loaded).__name__}, "
                f"expected {type(self._default).__name__}"
            )
            self._quarantine()
            return "", None

        return text, loaded

    def _quarantine(self) -> None:
        target = self.path.with_name(self.path.name + self.options.quarantine_suffix)
        os.replace(self.path, target)
        logger.warning(f"Moved unreadable {self.path} to {target}, using defaults")

    def _sync_text(self, text: str, merged: Any) -> str:
        """Edit ``text`` so it holds ``merged``, touching only differing paths."""
        formatting = self.options.formatting
        if not text.strip():
            return serialize(merged, formatting)
        current = parse(text, allow_empty_content=True)
        if current is None:
            return set_value(text, (), merged, formatting)
        return self._sync_node(text, current, merged, ())

    def _sync_node(self, text: str, current: Any, target: Any, path: AccessPath) -> str:
        formatting = self.options.formatting
        if not (isinstance(current, dict) and isinstance(target, dict)):
            return set_value(text, path, target, formatting)
        for key in current:
            if key not in target:
                text = set_value(text, path + (key,), REMOVE, formatting)
        for key, value in target.items():
            if key in current:
                text = self._sync_node(text, current[key], value, path + (key,))
            else:
                text = set_value(text, path + (key,), value, formatting)
        return text

    def _assign(self, merged: Any) -> None:
        """Copy ``merged`` into the live value through the views."""
        root = self.get()
        if isinstance(root, ListProxy):
            root[:] = merged
            return
        self._assign_mapping(root, merged)

    def _assign_mapping(self, proxy: ConfigProxy, merged: dict) -> None:
        for key in [k for k in proxy if k not in merged]:
            del proxy[key]
        for key, value in merged.items():
            current = proxy.get(key)
            if isinstance(value, dict) and isinstance(current, ConfigProxy):
                self._assign_mapping(current, value)
            else:
                proxy[key] = value

    # Saving

    def _render(self, indentation: Optional[int]) -> str:
        """Format the text cache in place and return it."""
        formatting = self.options.formatting
        if indentation is not None:
            formatting = formatting.model_copy(update={"tab_size": indentation})

        self._text = format_text(self._text, formatting)
        return self._text

    def _write_text(self, text: str) -> float:
        """
        Atomically replace the file with ``text``.

        Returns:
            The file's mtime after the write
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding=self.options.encoding, newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        # Stat after the write so the watcher compares against the real mtime
        return os.stat(self.path).st_mtime

    @contextmanager
    def _reassignment(self) -> Iterator[None]:
        self._reassigning = True
        try:
            yield
        finally:
            self._reassigning = False

    def _record_write(self, path: AccessPath, value: Any, insertion: bool = False) -> None:
        """Apply a write made through a view to the text cache, then persist."""
        if not self._loaded:
            # Before init() or after unload() writes only touch memory
            return

        self._text = set_value(self._text, path, value, self.options.formatting, is_array_insertion=insertion)
        if self._reassigning:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._last_save_time = self._write_text(self._render(None))
            return

        task = loop.create_task(self.save())
        self._pending_saves.add(task)
        task.add_done_callback(self._on_save_done)

    def _on_save_done(self, task: asyncio.Task) -> None:
        self._pending_saves.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Failed to save {self.path}: {error}")

    # Watching

    async def _on_file_event(self, event: FileEvent) -> None:
        async with self._lock:
            if event.kind is not FileEventKind.UNLINK and event.mtime is not None \
                    and event.mtime <= self._last_save_time:
                logger.debug(
                    f"Ignoring {event.kind.value} for {self.path}: "
                    f"mtime {event.mtime} <= last save {self._last_save_time}"
                )
                return

            logger.info(f"{self.path} changed on disk ({event.kind.value}), reloading")
            try:
                await self._load_locked()
            except Exception as e:
                logger.exception(f"Failed to reload {self.path}: {e}")


async def create_config(
    path: Union[str, Path],
    default: Any,
    watch_file: bool = False,
    options: Optional[StoreOptions] = None
) -> ConfigStore:
    """Create and initialize a ConfigStore."""
    return await ConfigStore.create(path, default, watch_file, options)
