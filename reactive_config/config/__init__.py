"""File-backed configuration store, change interception and file watching."""

from .file_watcher import FileEvent, FileEventKind, FileWatcher
from .merger import ConfigMerger, deep_merge
from .proxy import ConfigProxy, ListProxy, is_proxied, unwrap
from .store import ConfigStore, create_config

__all__ = [
    "ConfigMerger",
    "ConfigProxy",
    "ConfigStore",
    "FileEvent",
    "FileEventKind",
    "FileWatcher",
    "ListProxy",
    "create_config",
    "deep_merge",
    "is_proxied",
    "unwrap",
]
