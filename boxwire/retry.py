#!/usr/bin/env python3

# standards
from dataclasses import dataclass
from datetime import timedelta
import re
from typing import Optional, Union

# boxwire
from .config import Config
from .datastructures import Headers, Variant
from .status import TOO_MANY_REQUESTS


# Retry-After delays above this are clamped
MAX_RETRY_AFTER = timedelta(hours=1)


@dataclass(frozen=True)
class Retry:
    delay: timedelta
    retries_left: int


@dataclass(frozen=True)
class Done:
    pass


Step = Union[Retry, Done]

DONE = Done()


def next_step(
    variant: Variant,
    status_code: int,
    headers: Headers,
    retries_left: int,
    config: Config,
) -> Step:
    """
    Decide what to do after an attempt came back with the given status. Only a 429 is ever retried, and never for multipart
    requests: the file they upload is a stream that has already been consumed, so a resend would send a truncated body.
    """
    if status_code != TOO_MANY_REQUESTS or variant is Variant.MULTIPART or retries_left <= 0:
        return DONE
    delay = parse_retry_after(headers.get('Retry-After'))
    return Retry(
        delay=config.retry_fallback_delay if delay is None else delay,
        retries_left=retries_left - 1,
    )


def parse_retry_after(value: Optional[str]) -> Optional[timedelta]:
    """
    Parse a `Retry-After` header given in delta-seconds. The HTTP-date form isn't supported, and like any malformed value it
    gets treated as if the header was absent. Delays above `MAX_RETRY_AFTER` are clamped to it.
    """
    if value is None:
        return None
    # ASCII digits only
    if not re.fullmatch(r'[0-9]+', value.strip()):
        return None
    return timedelta(seconds=min(int(value), int(MAX_RETRY_AFTER.total_seconds())))
