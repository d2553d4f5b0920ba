"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so that every layer of the
event pipeline emits the same shape of record: a snake_case event name
followed by key=value pairs (default) or a single JSON object (for log
shippers).

Values containing spaces, equals signs, or quotes are escaped and wrapped
in double quotes. Long values (serialized event content, relay payloads)
are truncated to a configurable maximum length. Keys that name private key
material are always replaced with ``<redacted>`` before formatting.

Examples:
    ```python
    from nostrfeed.core.logger import Logger

    logger = Logger("feed")
    logger.info("page_merged", added=40, timeline=120)
    # Output: page_merged added=40 timeline=120

    json_logger = Logger("feed", json_output=True)
    json_logger.info("page_merged", added=40)
    # Output: {"message": "page_merged", "added": 40, ...}
    ```
"""

import datetime
import json
import logging
from typing import Any, ClassVar


REDACTED = "<redacted>"

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"privkey", "private_key", "secret_key", "nsec", "seckey"}
)


def redact(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *kwargs* with private key material masked."""
    return {k: (REDACTED if k.lower() in SENSITIVE_KEYS else v) for k, v in kwargs.items()}


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' kind=1 content="hello world"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in redact(kwargs).items():
        s = str(v)
        if max_value_length and len(s) > max_value_length:
            s = s[:max_value_length] + f"...<truncated {len(s) - max_value_length} chars>"
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts) if parts else ""


class StructuredFormatter(logging.Formatter):
    """Formats all log records as structured key=value output.

    Reads structured data from the ``structured_kv`` extra field attached by
    [Logger][nostrfeed.core.logger.Logger]. Records coming from plain
    ``logging.getLogger()`` calls (models, nips, utils) are emitted with the
    same ``level name message`` prefix.
    """

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        return base


class Logger:
    """Structured logger that appends keyword arguments as extra fields.

    All public methods mirror the standard logging API with an added
    ``**kwargs`` parameter.

    Examples:
        ```python
        logger = Logger("signer")
        logger.warning("event_signing_failed", kind=1, error="bad key")
        # Output: event_signing_failed kind=1 error="bad key"
        ```
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name, typically the component name (``feed``,
                ``factory``). Maps to ``logging.getLogger(name)``.
            json_output: If True, emit JSON objects instead of key=value pairs.
            max_value_length: Maximum character length for individual values
                before truncation. Defaults to 1000.
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length

    @property
    def name(self) -> str:
        return self._logger.name

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        """Format message and kwargs as a JSON string with ``timestamp``, ``level`` and ``component``."""
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "component": self._logger.name,
            "message": msg,
            **redact(kwargs),
        }
        return json.dumps(record, default=str)

    def _make_extra(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Build the ``extra`` dict, pre-truncating and redacting values."""
        if not kwargs:
            return {}
        truncated: dict[str, Any] = {}
        for k, v in redact(kwargs).items():
            s = str(v)
            if self._max_value_length and len(s) > self._max_value_length:
                truncated[k] = (
                    s[: self._max_value_length]
                    + f"...<truncated {len(s) - self._max_value_length} chars>"
                )
            else:
                truncated[k] = v
        return {"structured_kv": truncated}

    def _log(self, level: int, name: str, msg: str, kwargs: dict[str, Any]) -> None:
        if self._json_output:
            self._logger.log(level, self._format_json(msg, name, kwargs))
        else:
            self._logger.log(level, msg, extra=self._make_extra(kwargs))

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG level message with optional key=value pairs."""
        self._log(logging.DEBUG, "debug", msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO level message with optional key=value pairs."""
        self._log(logging.INFO, "info", msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING level message with optional key=value pairs."""
        self._log(logging.WARNING, "warning", msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with optional key=value pairs."""
        self._log(logging.ERROR, "error", msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        """Log a CRITICAL level message with optional key=value pairs."""
        self._log(logging.CRITICAL, "critical", msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with exception traceback and optional key=value pairs."""
        if self._json_output:
            self._logger.exception(self._format_json(msg, "error", kwargs))
        else:
            self._logger.exception(msg, extra=self._make_extra(kwargs))
