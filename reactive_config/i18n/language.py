"""
Language files: a ConfigStore holding a flat key -> text dictionary.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from ..config.store import ConfigStore
from ..errors import IllegalArgumentError
from ..models import StoreOptions

logger = logging.getLogger(__name__)


class Language(ConfigStore):
    """Translations for one language, backed by ``<code>.json``."""

    def __init__(
        self,
        path: Union[str, Path],
        watch_file: bool = False,
        default: Optional[Dict[str, str]] = None,
        options: Optional[StoreOptions] = None
    ):
        """
        Initialize language store.

        Args:
            path: Language file; its stem is the language code
            watch_file: Reload automatically when the file changes on disk
            default: Fallback translations
            options: Store options

        Raises:
            IllegalArgumentError: If ``default`` is not a flat str -> str dict
        """
        default = {} if default is None else default
        if not isinstance(default, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in default.items()
        ):
            raise IllegalArgumentError(default, "language defaults must map strings to strings")
        super().__init__(path, default, watch_file, options)

    @classmethod
    async def create(
        cls,
        path: Union[str, Path],
        watch_file: bool = False,
        default: Optional[Dict[str, str]] = None,
        options: Optional[StoreOptions] = None
    ) -> "Language":
        """Construct a language store and run init()."""
        language = cls(path, watch_file, default, options)
        await language.init()
        return language

    @property
    def code(self) -> str:
        """Language code (file name without extension)."""
        return self.path.stem

    def translate(self, key: str, substitutions: Sequence[Any] = ()) -> str:
        """
        Look up ``key`` and fill in its ``{0}``, ``{1}``, ... placeholders.

        Args:
            key: Translation key
            substitutions: Positional values, converted with str()

        Returns:
            The translated text, or ``key`` itself when there is no entry

        Raises:
            IllegalArgumentError: If ``substitutions`` is a bare string
        """
        if isinstance(substitutions, (str, bytes)):
            raise IllegalArgumentError(substitutions, "substitutions must be a sequence, not a string")

        text = self._value.get(key)
        if not isinstance(text, str) or not text:
            return key

        for index, substitution in enumerate(substitutions):
            text = text.replace(f"{{{index}}}", str(substitution))
        return text

    def __repr__(self) -> str:
        return f"Language(code={self.code!r}, entries={len(self._value)})"


async def create_language(
    path: Union[str, Path],
    watch_file: bool = False,
    default: Optional[Dict[str, str]] = None,
    options: Optional[StoreOptions] = None
) -> Language:
    """Create and initialize a Language."""
    return await Language.create(path, watch_file, default, options)
