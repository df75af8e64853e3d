"""Language files and the i18n registry built on ConfigStore."""

from .language import Language, create_language
from .registry import I18n, create_i18n

__all__ = ["I18n", "Language", "create_i18n", "create_language"]
