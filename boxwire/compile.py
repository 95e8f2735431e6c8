#!/usr/bin/env python3

# standards
from itertools import chain
from typing import BinaryIO, Callable, Dict, Iterator, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode
from uuid import uuid4

# 3rd parties
from requests.utils import super_len

# boxwire
from .config import Config
from .datastructures import (
    BinaryBody,
    CompiledRequest,
    FilePart,
    Headers,
    Method,
    MultipartBody,
    Part,
    Request,
    StandardBody,
    StringPart,
    Variant,
)
from .exceptions import CompileError, UnsupportedMethod
from .logs import LOGGER


# The HTTP stack refuses these at the message level, they need to go with the body
BODY_LEVEL_HEADERS = frozenset(['content-md5', 'content-range'])

METHODS_BY_NAME: Dict[str, Method] = {method.value: method for method in Method}

MULTIPART_CHUNK_SIZE = 64 * 1024

CompiledData = Optional[Union[bytes, BinaryIO, 'MultipartStream']]


def get_http_method(method: Union[Method, str, None]) -> Method:
    if isinstance(method, Method):
        return method
    found = METHODS_BY_NAME.get(method.upper()) if isinstance(method, str) else None
    if found is None:
        raise UnsupportedMethod(f'HTTP method not supported: {method!r}')
    return found


def compile_request(req: Request, config: Config) -> CompiledRequest:
    """
    Build the wire request for one attempt at sending `req`. This must be called anew for every attempt, since the bodies of
    binary and multipart requests are streams that can only be read once.
    """
    method = get_http_method(req.method)
    body_headers = Headers()
    method, data = BODY_COMPILERS[req.variant](req.body, method, body_headers)
    headers = _compile_request_headers(config, req, body_headers)
    if body_headers and data is None:
        LOGGER.warning('Dropping body headers %r: %s request has no body', list(body_headers), method.value)
    return CompiledRequest(
        url=_compile_request_url(req),
        method=method,
        variant=req.variant,
        headers=headers,
        body_headers=body_headers,
        data=data,
        timeout=req.timeout,
        follow_redirects=req.follow_redirects,
    )


def _compile_request_headers(config: Config, req: Request, body_headers: Headers) -> Headers:
    headers = Headers()
    # Values are passed through untouched, some signed header values wouldn't survive validation
    for key, value in chain(config.headers.items() if config.headers else (), req.headers):
        if key.lower() in BODY_LEVEL_HEADERS:
            body_headers.add(key, value)
        else:
            headers.add(key, value)
    headers.setdefault('Accept', '*/*')
    if config.user_agent:
        headers.setdefault('User-Agent', config.user_agent)
    return headers


def _compile_request_url(req: Request) -> str:
    if not req.params:
        return req.url
    url = req.url.rstrip('?&')
    return (
        url
        + ('&' if '?' in url else '?')
        # We unconditionally use UTF-8 to encode URL params. In cases where this isn't desirable, the client should urlencode the
        # params itself, and pass them in str form, as part of the `url`.
        + urlencode(req.params, encoding='UTF-8')
    )


def _compile_standard(body: StandardBody, method: Method, body_headers: Headers) -> Tuple[Method, CompiledData]:
    if method is Method.GET:
        return method, None
    if body.payload is not None and body.payload.strip():
        content_type = body.content_type or 'text/plain'
        encoding = body.content_encoding or 'UTF-8'
        try:
            data = body.payload.encode(encoding)
        except (LookupError, UnicodeEncodeError) as error:
            raise CompileError(f"Can't encode request payload as {encoding!r}: {error}") from error
        body_headers.add('Content-Type', f'{content_type}; charset={encoding}')
        return method, data
    body_headers.add('Content-Type', 'application/x-www-form-urlencoded')
    return method, urlencode(body.parameters).encode('ASCII')


def _compile_binary(body: BinaryBody, method: Method, body_headers: Headers) -> Tuple[Method, CompiledData]:
    return method, body.stream


def _compile_multipart(body: MultipartBody, method: Method, body_headers: Headers) -> Tuple[Method, CompiledData]:
    string_parts = [part for part in body.parts if not part.is_file]
    # Only a single file upload is supported, any file parts after the first are dropped
    file_part = next((part for part in body.parts if part.is_file), None)
    data = MultipartStream(string_parts, file_part)  # type: ignore[arg-type]
    body_headers.add('Content-Type', f'multipart/form-data; boundary={data.boundary}')
    return Method.POST, data


BODY_COMPILERS: Dict[Variant, Callable[..., Tuple[Method, CompiledData]]] = {
    Variant.STANDARD: _compile_standard,
    Variant.BINARY: _compile_binary,
    Variant.MULTIPART: _compile_multipart,
}


def force_quotes(name: str) -> str:
    # The API won't accept multipart parameter names that aren't surrounded by quotes
    return f'"{name}"'


class MultipartStream:
    """
    A multipart/form-data body, produced lazily so that the file part is streamed from its source rather than read into memory.

    `len` follows the convention that `requests` understands: it's the total body length if we can tell what it is, or 0 if we
    can't, in which case `requests` falls back to a chunked upload.
    """

    def __init__(
        self,
        string_parts: Sequence[StringPart],
        file_part: Optional[FilePart],
        boundary: Optional[str] = None,
    ) -> None:
        self.boundary = boundary or uuid4().hex
        self.file_part = file_part
        self.head = b''.join(self._compose_part_head(part) + part.value.encode('UTF-8') + b'\r\n' for part in string_parts)
        if file_part is not None:
            self.head += self._compose_part_head(file_part)
        self.tail = (b'\r\n' if file_part is not None else b'') + f'--{self.boundary}--\r\n'.encode('ASCII')
        if file_part is None:
            self.len = len(self.head) + len(self.tail)
        else:
            file_length = super_len(file_part.value)
            self.len = len(self.head) + file_length + len(self.tail) if file_length else 0

    def _compose_part_head(self, part: Part) -> bytes:
        lines = [f'--{self.boundary}']
        if part.is_file:
            lines += [
                'Content-Type: application/octet-stream',
                f'Content-Disposition: form-data; name={force_quotes(part.name)}; filename={force_quotes(part.file_name)}',  # type: ignore[union-attr]
            ]
        else:
            lines += [
                'Content-Type: text/plain; charset=utf-8',
                f'Content-Disposition: form-data; name={force_quotes(part.name)}',
            ]
        return ('\r\n'.join(lines) + '\r\n\r\n').encode('UTF-8')

    def __iter__(self) -> Iterator[bytes]:
        yield self.head
        if self.file_part is not None:
            while True:
                chunk = self.file_part.value.read(MULTIPART_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        yield self.tail
