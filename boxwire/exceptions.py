#!/usr/bin/env python3

# standards
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .datastructures import Response


class BoxwireException(Exception):
    pass


class UnsupportedMethod(BoxwireException, ValueError):
    """
    The request descriptor names an HTTP method outside of the closed set that this library knows how to send. This is a
    programming or configuration error on the caller's side, it is never raised because of something a server sent back.
    """


class CompileError(BoxwireException, ValueError):
    """
    The request descriptor can't be turned into a wire request, e.g. a payload that can't be encoded in its declared encoding.
    """


class TransportError(BoxwireException):
    """
    Raised when the HTTP transaction itself failed, i.e. we didn't get a response at all, or the connection died while reading
    it. These are never retried by this library.
    """


class ConnectionError(TransportError):  # pylint: disable=redefined-builtin
    pass


class Timeout(TransportError):
    pass


class HttpError(BoxwireException):
    """
    Only raised by `Response.raise_for_status`. `HttpClient.execute` never raises this, callers should look at
    `Response.status` instead.
    """

    def __init__(self, message: str, response: 'Response') -> None:
        super().__init__(message)
        self.response = response
