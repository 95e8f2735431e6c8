#!/usr/bin/env python3

# standards
from enum import Enum
from typing import Dict


class Status(Enum):
    """
    The closed set of outcomes that callers branch on, rather than looking at raw status codes.
    """

    SUCCESS = 'success'
    PENDING = 'pending'
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'
    TOO_MANY_REQUESTS = 'too-many-requests'
    ERROR = 'error'


TOO_MANY_REQUESTS = 429


STATUS_BY_CODE: Dict[int, Status] = {
    200: Status.SUCCESS,
    201: Status.SUCCESS,
    204: Status.SUCCESS,
    # The API answers some download requests with a 302 to the actual content. When redirects aren't followed, that's a success
    302: Status.SUCCESS,
    202: Status.PENDING,
    401: Status.UNAUTHORIZED,
    403: Status.FORBIDDEN,
    TOO_MANY_REQUESTS: Status.TOO_MANY_REQUESTS,
}


def classify_status(status_code: int) -> Status:
    return STATUS_BY_CODE.get(status_code, Status.ERROR)
