"""
I18n registry.

Owns one Language per code found in a directory and routes translation
lookups to the active one.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ..constants import LANGUAGE_FILE_EXTENSION
from ..errors import IllegalArgumentError, LanguageNotFoundError
from ..models import StoreOptions
from .language import Language

logger = logging.getLogger(__name__)


class I18n:
    """Registry of Language stores keyed by language code."""

    def __init__(
        self,
        directory: Union[str, Path],
        active_code: str,
        watch_file: bool = False,
        default: Optional[Dict[str, str]] = None,
        options: Optional[StoreOptions] = None
    ):
        """
        Initialize the registry. Nothing is loaded until load_all_languages().

        Args:
            directory: Directory holding one ``<code>.json`` per language
            active_code: Language used when no code is given
            watch_file: Watch every language file for changes
            default: Fallback translations for every language
            options: Store options passed to each Language
        """
        self.directory = Path(directory)
        self.active_code = active_code
        self.watch_file = watch_file
        self.default: Dict[str, str] = dict(default or {})
        self.options = options
        self._languages: Dict[str, Language] = {}

    async def __aenter__(self) -> "I18n":
        await self.load_all_languages()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unload_all_languages()

    @property
    def languages(self) -> List[str]:
        """Codes of the loaded languages."""
        return list(self._languages)

    def __contains__(self, code: object) -> bool:
        return code in self._languages

    def _language_files(self) -> List[Path]:
        suffix = self.options.quarantine_suffix if self.options else StoreOptions().quarantine_suffix
        return sorted(
            entry for entry in self.directory.iterdir()
            if entry.is_file()
            and entry.suffix == LANGUAGE_FILE_EXTENSION
            and not entry.name.endswith(suffix)
        )

    async def load_all_languages(self) -> None:
        """
        Load every language file in the directory.

        Raises:
            OSError: If the directory cannot be listed
        """
        files = await asyncio.to_thread(self._language_files)
        for file in files:
            await self.load_language(file.stem)
        logger.info(f"Loaded {len(files)} languages from {self.directory}")

    async def load_language(self, language: Union[str, Language]) -> None:
        """
        Load a language by code, or register an already constructed Language.

        A code that is already loaded is unloaded first.

        Args:
            language: Language code or Language instance

        Raises:
            IllegalArgumentError: If ``language`` is neither
        """
        if isinstance(language, Language):
            code = language.code
        elif isinstance(language, str):
            code = language
        else:
            raise IllegalArgumentError(language, "expected a language code or a Language")

        previous = self._languages.pop(code, None)
        if previous is not None and previous is not language:
            await previous.unload()

        if isinstance(language, str):
            language = await Language.create(
                self.directory / f"{code}{LANGUAGE_FILE_EXTENSION}",
                self.watch_file,
                self.default,
                self.options
            )
        self._languages[code] = language
        logger.debug(f"Loaded language '{code}'")

    def switch_language(self, code: str) -> None:
        """Make ``code`` the active language; unknown codes are ignored."""
        if code in self._languages:
            self.active_code = code
        else:
            logger.debug(f"Not switching to unloaded language '{code}'")

    def get(self, code: Optional[str] = None) -> Language:
        """
        Get the Language for ``code`` (or the active code).

        Raises:
            LanguageNotFoundError: If that language is not loaded
        """
        code = code or self.active_code
        language = self._languages.get(code)
        if language is None:
            raise LanguageNotFoundError(code, self._languages)
        return language

    def translate(self, key: str, substitutions: Sequence[Any] = (), code: Optional[str] = None) -> str:
        """Translate with the given or active language; the key itself if it is not loaded."""
        code = code or self.active_code
        if code not in self._languages:
            return key
        return self._languages[code].translate(key, substitutions)

    async def unload_language(self, code: str) -> None:
        language = self._languages.pop(code, None)
        if language is not None:
            await language.unload()

    async def reload_language(self, code: str) -> None:
        language = self._languages.get(code)
        if language is not None:
            await language.reload()

    async def reload_all_languages(self) -> None:
        for language in list(self._languages.values()):
            await language.reload()

    async def unload_all_languages(self) -> None:
        for code in list(self._languages):
            await self.unload_language(code)


async def create_i18n(
    directory: Union[str, Path],
    active_code: str,
    watch_file: bool = False,
    default: Optional[Dict[str, str]] = None,
    options: Optional[StoreOptions] = None
) -> I18n:
    """Create a registry and load every language in ``directory``."""
    i18n = I18n(directory, active_code, watch_file, default, options)
    await i18n.load_all_languages()
    return i18n
