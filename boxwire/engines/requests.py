#!/usr/bin/env python3

# standards
from functools import partial
from typing import Callable, Optional

# 3rd parties
import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import HTTPError as Urllib3Error, ProtocolError, ReadTimeoutError

# boxwire
from ..config import Config
from ..datastructures import BodyStream, CompiledRequest, Headers, RawResponse
from ..exceptions import ConnectionError, Timeout, TransportError
from .base import Engine
from .register import register_engine
from .sessions import SessionFactory


class RequestsEngine(Engine):

    id = 'requests'

    def __init__(self, sessions: Optional[SessionFactory] = None) -> None:
        self.sessions = sessions or SessionFactory()

    def short_code(self) -> str:
        return 'rq'

    def close(self) -> None:
        self.sessions.close()

    def request(self, creq: CompiledRequest, config: Config, stream: bool) -> RawResponse:
        session = self.sessions.acquire(config.session_policy)
        release = partial(self.sessions.release, session, config.session_policy)
        try:
            rres = session.request(
                url=creq.url,
                method=creq.method.value,
                headers=self._compose_headers(creq),
                data=creq.data,
                allow_redirects=creq.follow_redirects,
                # When the request specifies no timeout, neither do we
                timeout=creq.timeout.total_seconds() if creq.timeout is not None else None,
                verify=config.verify,
                proxies=config.proxies,
                stream=stream,
            )
        except requests.exceptions.RequestException as error:
            release()
            raise _translate_error(error) from error
        headers = Headers(rres.raw.headers.items())
        if stream:
            # `requests` only decompresses what it reads itself, we need to ask urllib3 to do it for the raw stream
            rres.raw.decode_content = True
            return RawResponse(
                status_code=rres.status_code,
                reason=rres.reason,
                headers=headers,
                stream=RequestsBodyStream(rres.raw, on_close=partial(_close_all, rres.close, release)),
            )
        try:
            content = rres.content
        except requests.exceptions.RequestException as error:
            raise _translate_error(error) from error
        finally:
            rres.close()
            release()
        return RawResponse(
            status_code=rres.status_code,
            reason=rres.reason,
            headers=headers,
            content=content,
        )

    @staticmethod
    def _compose_headers(creq: CompiledRequest) -> CaseInsensitiveDict:
        composed: CaseInsensitiveDict = CaseInsensitiveDict()
        sources = [creq.headers]
        if creq.data is not None:
            sources.append(creq.body_headers)
        for headers in sources:
            for key in headers:
                composed[key] = ', '.join(headers.get_all(key))
        return composed


class RequestsBodyStream(BodyStream):
    """
    The still-unread urllib3 body of a `requests` response. Read failures are raised as `TransportError`, the same as when
    `requests` reads the body itself.
    """

    def read(self, size: int = -1) -> bytes:
        try:
            return super().read(size)
        except ReadTimeoutError as error:
            raise Timeout(error) from error
        except ProtocolError as error:
            raise ConnectionError(error) from error
        except Urllib3Error as error:
            raise TransportError(error) from error


def _translate_error(error: requests.exceptions.RequestException) -> TransportError:
    # NB `ConnectTimeout` is both a `ConnectionError` and a `Timeout`, we want it reported as the latter
    if isinstance(error, requests.exceptions.Timeout):
        return Timeout(error)
    if isinstance(error, requests.exceptions.ConnectionError):
        return ConnectionError(error)
    return TransportError(error)


def _close_all(*closers: Callable[[], None]) -> None:
    try:
        closers[0]()
    finally:
        if closers[1:]:
            _close_all(*closers[1:])


register_engine(RequestsEngine)
