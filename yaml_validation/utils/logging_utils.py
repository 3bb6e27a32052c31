import logging
import sys
from typing import Optional, Union

Level = Union[int, str]


def parse_level(level: Level, default: int = logging.INFO) -> int:
    """Turn ``"debug"``/``"INFO"``/``10`` into a logging level number."""
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    if not isinstance(value, int):
        return default
    return value


class _BelowLevelFilter(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def configure_split_stream_logging(
    *,
    level: Level = logging.INFO,
    stderr_level: Level = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Logger:
    """Configure root logging for command line validation runs.

    Records below *stderr_level* go to stdout, the rest to stderr, so
    validation failures stay visible when defaulted documents are piped
    from stdout.
    """
    level = parse_level(level)
    stderr_level = max(parse_level(stderr_level, logging.WARNING), logging.DEBUG)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    if formatter is None:
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_BelowLevelFilter(stderr_level))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(stderr_level)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)
    return root
