#!/usr/bin/env python3

# standards
from collections.abc import Iterator
from dataclasses import dataclass
import logging
from typing import List, Optional, Union

# boxwire
from .datastructures import CompiledRequest

LOGGER = logging.getLogger("boxwire")


@dataclass(frozen=False)
class LogEntry:
    creq: CompiledRequest
    num_retries: int = 0
    engine_short_code: Optional[str] = None
    status_code: Optional[int] = None
    streamed: bool = False

    def _compose_line(self) -> Iterator[str]:
        engine_and_retry = self._compose_engine_and_retry()
        if engine_and_retry:
            yield f"{engine_and_retry:8s} "
        else:
            yield "         "
        yield f"{self.creq.method.value} {self.creq.url}"
        data_length = self.creq.data_length
        if data_length is not None:
            yield f" [{data_length} bytes]"
        elif self.creq.data is not None:
            yield " [streamed body]"
        if self.status_code is not None:
            yield f" -> {self.status_code}"
        if self.streamed:
            yield " (stream)"

    def _compose_engine_and_retry(self) -> Optional[str]:
        parts: List[str] = []
        if self.engine_short_code:
            parts.append(self.engine_short_code)
        if self.num_retries:
            parts.append(f"r{self.num_retries}")
        if not parts:
            return None
        return "[%s]" % "+".join(parts)  # noqa: UP031

    def __str__(self) -> str:
        return "".join(self._compose_line())


def basic_logging_config(level: Union[int, str] = "INFO", propagate: bool = False) -> None:
    """
    Sets up logging for the common use case. Calls `logging.basicConfig`, lowers verbosity for the `urllib3` logger. If `propagate`
    is False (the default), a new handler will be attached to `boxwire.LOGGER` that logs in a simple format to stderr, and does
    not propagate log events to the root logger.
    """
    if not isinstance(level, int):
        level = getattr(logging, level)
    logging.basicConfig(level=level)
    logging.getLogger("urllib3").setLevel(max(logging.WARNING, level))
    if not propagate and not LOGGER.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(message)s", None, "%")
        handler.setFormatter(formatter)
        LOGGER.addHandler(handler)
        LOGGER.propagate = False
