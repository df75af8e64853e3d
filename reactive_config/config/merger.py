"""
Configuration merger for file-backed stores.

Merges two layers with precedence:
1. Caller-supplied defaults (lowest priority)
2. Values read from the file (highest priority)

Mappings merge key-wise and recursively. Scalars and arrays from the file
replace the default wholesale.
"""

import copy
import logging
from typing import Any, Dict, List

from ..jsonc.parser import AccessPath

logger = logging.getLogger(__name__)


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return "scalar"


class ConfigMerger:
    """Merges file contents over default values and records kind conflicts."""

    def __init__(self):
        """Initialize configuration merger."""
        self.conflicts: List[Dict[str, Any]] = []

    def merge(self, defaults: Any, loaded: Any) -> Any:
        """
        Merge a loaded value over defaults.

        Precedence: File > Defaults

        Args:
            defaults: Default template (never modified)
            loaded: Value parsed from the file (never modified)

        Returns:
            New merged value sharing no containers with either input
        """
        self.conflicts = []
        return self._merge(defaults, loaded, ())

    def _merge(self, defaults: Any, loaded: Any, path: AccessPath) -> Any:
        if isinstance(defaults, dict) and isinstance(loaded, dict):
            # File order first, then keys only the defaults know
            merged = {}
            for key, value in loaded.items():
                if key in defaults:
                    merged[key] = self._merge(defaults[key], value, path + (key,))
                else:
                    merged[key] = copy.deepcopy(value)
            for key, value in defaults.items():
                if key not in merged:
                    merged[key] = copy.deepcopy(value)
            return merged

        default_kind = _kind(defaults)
        loaded_kind = _kind(loaded)
        if default_kind != loaded_kind and (default_kind != "scalar" or loaded_kind != "scalar"):
            self.conflicts.append({
                "path": list(path),
                "default": default_kind,
                "file": loaded_kind,
                "resolution": "file"
            })
            logger.warning(
                f"Type conflict at '{'.'.join(str(s) for s in path) or '<root>'}': "
                f"default is {default_kind}, file has {loaded_kind}, using file"
            )
        return copy.deepcopy(loaded)


def deep_merge(defaults: Any, loaded: Any) -> Any:
    """Merge ``loaded`` over ``defaults`` (see ConfigMerger.merge)."""
    return ConfigMerger().merge(defaults, loaded)
