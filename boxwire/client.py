#!/usr/bin/env python3

# standards
from contextlib import contextmanager
from time import sleep
from typing import Any, Iterator, Optional, Union

# boxwire
from .body import materialize_response
from .compile import compile_request
from .config import Config
from .datastructures import Body, CompiledRequest, Method, RawResponse, Request, Response, StandardBody
from .engines import EngineSpec, load_engine
from .exceptions import TransportError
from .logs import LOGGER, LogEntry
from .retry import Retry, next_step
from .status import classify_status


class HttpClient:
    """
    Core class for this package. Executes `Request` descriptors, retrying those that get rate-limited, and returns a `Response`
    whose `status` tells the caller how it went.

    The client keeps no state between calls, other than the engine's session pool when `session_policy` is `POOLED`, so one
    instance can be shared between threads.
    """

    def __init__(
        self,
        engine: EngineSpec = 'requests',
        **config_kwargs,
    ) -> None:
        self.config = Config.build(**config_kwargs)
        self.engine = load_engine(engine)

    def execute(self, request: Request, stream: bool = False, **config_kwargs) -> Response:
        """
        Main public method for this class.

        If `stream` is True and the request succeeds, the body is returned unread in `Response.stream`, and it's up to the caller
        to close it. Otherwise it's read in full and returned in `Response.text`.

        HTTP-level failures, including running out of retries on a 429, are reported via `Response.status` and never raised. Only
        transport failures raise, as `TransportError`.
        """
        config, unused_kwargs = self.config.derive_using_kwargs(**config_kwargs)
        if unused_kwargs:
            raise TypeError(f'Unexpected keyword arguments: {", ".join(sorted(unused_kwargs))}')
        return self._execute(request, config, stream)

    def _execute(self, request: Request, config: Config, stream: bool) -> Response:
        retries_left = config.max_retries
        num_retries = 0
        while True:
            # Compiled anew every time round, the previous attempt has consumed any stream in the body
            creq = compile_request(request, config)
            log = LogEntry(creq, num_retries=num_retries, engine_short_code=self.engine.short_code(), streamed=stream)
            with _logging_transport_errors(creq):
                raw = self.engine.request(creq, config, stream)
            log.status_code = raw.status_code
            LOGGER.info('%s', log)
            step = next_step(creq.variant, raw.status_code, raw.headers, retries_left, config)
            if not isinstance(step, Retry):
                # Reading the body can fail too, the connection may break after the headers came in
                with _logging_transport_errors(creq):
                    return materialize_response(creq, raw, classify_status(raw.status_code), stream, num_retries)
            self._discard(raw)
            LOGGER.warning(
                'Too many requests (429), sleeping %.1fs before retrying, %d retries left: %s',
                step.delay.total_seconds(),
                step.retries_left,
                creq.url,
            )
            sleep(step.delay.total_seconds())
            retries_left = step.retries_left
            num_retries += 1

    @staticmethod
    def _discard(raw: RawResponse) -> None:
        if raw.stream is not None:
            raw.stream.close()

    def close(self) -> None:
        self.engine.close()

    def __enter__(self) -> 'HttpClient':
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()

    ### shortcuts for requests with a standard body

    def request(
        self,
        method: Union[Method, str],
        url: str,
        body: Optional[Body] = None,
        stream: bool = False,
        **kwargs,
    ) -> Response:
        config, request_kwargs = self.config.derive_using_kwargs(**kwargs)
        req = Request(url=url, method=method, body=body or StandardBody(), **request_kwargs)
        return self._execute(req, config, stream)

    def get(self, url: str, **kwargs) -> Response:
        return self.request(Method.GET, url, **kwargs)

    def post(self, url: str, body: Optional[Body] = None, **kwargs) -> Response:
        return self.request(Method.POST, url, body=body, **kwargs)

    def put(self, url: str, body: Optional[Body] = None, **kwargs) -> Response:
        return self.request(Method.PUT, url, body=body, **kwargs)

    def delete(self, url: str, **kwargs) -> Response:
        return self.request(Method.DELETE, url, **kwargs)

    def options(self, url: str, **kwargs) -> Response:
        return self.request(Method.OPTIONS, url, **kwargs)


@contextmanager
def _logging_transport_errors(creq: CompiledRequest) -> Iterator[None]:
    try:
        yield
    except TransportError as error:
        LOGGER.error('%s: %s (%s %s)', type(error).__name__, error, creq.method.value, creq.url)
        raise
