"""Default values shared by the store, the watcher and the i18n registry."""

# Indentation width used by save() when no explicit width is given
DEFAULT_INDENTATION = 4

DEFAULT_EOL = "\n"

# awaitWriteFinish-style settling: the file must stay unchanged this long
STABILITY_THRESHOLD_MS = 500
POLL_INTERVAL_MS = 100

# Seconds to wait for the watchdog observer thread on close
OBSERVER_JOIN_TIMEOUT_S = 5.0

# Suffix appended to a file that failed to parse before it is replaced
QUARANTINE_SUFFIX = "_old"

FILE_ENCODING = "utf-8"

# One language file per code inside the i18n directory
LANGUAGE_FILE_EXTENSION = ".json"
