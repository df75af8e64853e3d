"""
Pydantic option models for reactive-config.

Defines formatting, watcher and store settings with validation rules.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_EOL,
    DEFAULT_INDENTATION,
    FILE_ENCODING,
    OBSERVER_JOIN_TIMEOUT_S,
    POLL_INTERVAL_MS,
    QUARANTINE_SUFFIX,
    STABILITY_THRESHOLD_MS,
)


class FormattingOptions(BaseModel):
    """How the JSONC editor lays out inserted values and formatted text."""

    model_config = ConfigDict(frozen=True)

    tab_size: int = Field(DEFAULT_INDENTATION, ge=0, le=16, description="Spaces per indentation level")
    insert_spaces: bool = Field(True, description="Indent with spaces instead of tabs")
    eol: str = Field(DEFAULT_EOL, description="Line terminator for inserted line breaks")
    insert_final_newline: bool = Field(True, description="End formatted documents with eol")

    @field_validator('eol')
    @classmethod
    def validate_eol(cls, v: str) -> str:
        """Only LF and CRLF are meaningful line terminators."""
        if v not in ("\n", "\r\n"):
            raise ValueError(f"Unsupported line terminator: {v!r}")
        return v

    @property
    def indent_unit(self) -> str:
        """One level of indentation."""
        return " " * self.tab_size if self.insert_spaces else "\t"


class WatchOptions(BaseModel):
    """Debounce settings for the file watcher."""

    model_config = ConfigDict(frozen=True)

    stability_threshold_ms: int = Field(
        STABILITY_THRESHOLD_MS, ge=0,
        description="Quiet period the file size and mtime must hold before an event fires"
    )
    poll_interval_ms: int = Field(POLL_INTERVAL_MS, gt=0, description="Polling step while settling")
    join_timeout_s: float = Field(OBSERVER_JOIN_TIMEOUT_S, gt=0, description="Observer shutdown timeout")


class StoreOptions(BaseModel):
    """Settings for a ConfigStore."""

    model_config = ConfigDict(frozen=True)

    formatting: FormattingOptions = Field(default_factory=FormattingOptions)
    watch: WatchOptions = Field(default_factory=WatchOptions)
    quarantine_suffix: str = Field(QUARANTINE_SUFFIX, min_length=1, description="Suffix for unparsable files")
    encoding: str = Field(FILE_ENCODING, description="Text encoding of the backing file")
