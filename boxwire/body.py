#!/usr/bin/env python3

# standards
import codecs
from email.message import Message
from typing import Optional

# 3rd parties
import chardet

# boxwire
from .datastructures import CompiledRequest, Headers, RawResponse, Response
from .status import Status


def materialize_response(
    creq: CompiledRequest,
    raw: RawResponse,
    status: Status,
    stream: bool,
    num_retries: int = 0,
) -> Response:
    """
    Turn what the engine returned into the `Response` that goes back to the caller. A stream is only handed over if one was
    asked for and the request succeeded. In every other case the body is read in full and decoded to text, including error
    bodies that arrived on a stream.
    """
    if stream and status is Status.SUCCESS and raw.stream is not None:
        return Response(
            request=creq,
            status_code=raw.status_code,
            reason=raw.reason,
            status=status,
            headers=raw.headers,
            stream=raw.stream,
            num_retries=num_retries,
        )
    if raw.stream is not None:
        with raw.stream:
            content = raw.stream.read()
    else:
        content = raw.content or b''
    return Response(
        request=creq,
        status_code=raw.status_code,
        reason=raw.reason,
        status=status,
        headers=raw.headers,
        text=decode_text(content, raw.headers),
        num_retries=num_retries,
    )


def decode_text(content: bytes, headers: Headers) -> str:
    if not content:
        return ''
    encoding = charset_from_headers(headers)
    if encoding is None:
        try:
            return content.decode('UTF-8')
        except UnicodeDecodeError:
            encoding = chardet.detect(content)['encoding'] or 'UTF-8'
    return content.decode(encoding, errors='replace')


def charset_from_headers(headers: Headers) -> Optional[str]:
    content_type = headers.get('Content-Type')
    if not content_type:
        return None
    message = Message()
    message['Content-Type'] = content_type
    charset = message.get_content_charset()
    if charset is None:
        return None
    try:
        return codecs.lookup(charset).name
    except LookupError:
        # unknown charset, let the caller guess instead
        return None
