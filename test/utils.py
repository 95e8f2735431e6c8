#!/usr/bin/env python3

# standards
from io import BytesIO
from typing import Dict, List, Optional, Sequence

# boxwire
from boxwire import Engine, Headers, Request
from boxwire.compile import compile_request
from boxwire.config import Config
from boxwire.datastructures import BodyStream, CompiledRequest, RawResponse


def dummy_compiled_request(request: Optional[Request] = None, **config_kwargs) -> CompiledRequest:
    if request is None:
        request = Request(url='http://example.com/test')
    return compile_request(request, Config.build(**config_kwargs))


def dummy_raw_response(
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
    data: bytes = b'This is my response data',
    stream: bool = False,
) -> RawResponse:
    if stream:
        return RawResponse(
            status_code=status_code,
            reason=None,
            headers=Headers(headers),
            stream=BodyStream(BytesIO(data)),
        )
    return RawResponse(
        status_code=status_code,
        reason=None,
        headers=Headers(headers),
        content=data,
    )


def read_body(creq: CompiledRequest) -> bytes:
    """
    Consume the compiled body, whatever form it takes, and return it as bytes
    """
    if creq.data is None or isinstance(creq.data, bytes):
        return creq.data or b''
    if hasattr(creq.data, 'read'):
        return creq.data.read()  # type: ignore[union-attr]
    return b''.join(creq.data)  # type: ignore[arg-type]


class ScriptedEngine(Engine):
    """
    An engine that doesn't talk to any server, but plays back a fixed sequence of responses, and records the requests it was
    given, after consuming their bodies the way a real engine would.
    """

    id = 'scripted'

    def __init__(self, responses: Sequence[RawResponse] = ()) -> None:
        self.responses = list(responses)
        self.requests: List[CompiledRequest] = []
        self.bodies: List[bytes] = []

    def request(self, creq: CompiledRequest, config: Config, stream: bool) -> RawResponse:
        self.requests.append(creq)
        self.bodies.append(read_body(creq))
        return self.responses.pop(0)
