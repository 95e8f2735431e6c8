#!/usr/bin/env python3

# standards
from abc import ABC, abstractmethod
from typing import ClassVar

# boxwire
from ..config import Config
from ..datastructures import CompiledRequest, RawResponse


class Engine(ABC):

    id: ClassVar[str]

    def short_code(self) -> str:
        return self.id[:2]

    def close(self) -> None:
        pass

    @abstractmethod
    def request(self, creq: CompiledRequest, config: Config, stream: bool) -> RawResponse:
        """
        Perform one HTTP request, and return the response from the server, or raise a `TransportError`.

        If `stream` is False, the whole body must have been read before this returns, and the response placed in
        `RawResponse.content`. If `stream` is True, this must return as soon as the headers are in, with the still-unread body in
        `RawResponse.stream`.

        Either way the body must already be decompressed. Redirects are followed, or not, according to
        `creq.follow_redirects`. Implementing subclasses should not retry anything, retries are handled by the HttpClient class.

        `creq.body_headers` go along with the body, and must not be sent if `creq.data` is None.
        """
