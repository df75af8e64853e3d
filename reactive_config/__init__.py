"""
reactive-config

File-backed configuration values kept in sync with JSONC files on disk,
with comment-preserving edits, change watching and language files.
"""

from .config import ConfigProxy, ConfigStore, ListProxy, create_config, is_proxied, unwrap
from .errors import (
    ConfigError,
    ErrorCode,
    IllegalArgumentError,
    IndexOutOfBoundsError,
    JsoncSyntaxError,
    LanguageNotFoundError,
)
from .i18n import I18n, Language, create_i18n, create_language
from .models import FormattingOptions, StoreOptions, WatchOptions

__version__ = "1.0.0"

__all__ = [
    "ConfigError",
    "ConfigProxy",
    "ConfigStore",
    "ErrorCode",
    "FormattingOptions",
    "I18n",
    "IllegalArgumentError",
    "IndexOutOfBoundsError",
    "JsoncSyntaxError",
    "Language",
    "LanguageNotFoundError",
    "ListProxy",
    "StoreOptions",
    "WatchOptions",
    "create_config",
    "create_i18n",
    "create_language",
    "is_proxied",
    "unwrap",
]
