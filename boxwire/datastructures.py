#!/usr/bin/env python3

# standards
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from typing import (
    # We use the title-cased Dict, List and Tuple for backwards compat with pythons <3.9
    Any,
    BinaryIO,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

# boxwire
from .exceptions import HttpError
from .status import Status


HeadersSpec = Union['Headers', Mapping, Iterable[Tuple[str, str]]]


class Headers:
    """
    A headers dict that uses case-insensitive keys and allows multiple values per key (for e.g. repeated "Set-Cookie" headers).

    Note that we deliberately don't inherit from `abc.Mapping` or similar because the interface isn't _quite_ that of a dict,
    because some methods return strings, and some return lists of strings.
    """

    _dict: Dict[str, List[Tuple[str, str]]]

    def __init__(self, base: Optional[HeadersSpec] = None) -> None:
        self._dict = {}
        if base:
            self.add_all(base)

    def __bool__(self) -> bool:
        return bool(self._dict)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._dict

    def __getitem__(self, key: str) -> str:
        """
        Return the headers with the given key, as a single string. This is for convenience -- in 99.99% of cases users expect a
        single value, and don't want to deal with a list that will only have one element in it. Use `get_all` if you want all
        values.
        """
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value_list = self.get_all(key)
        if not value_list:
            return default
        return '; '.join(value_list)

    def get_all(self, key: str, default: Sequence[str] = ()) -> Sequence[str]:
        value_list = self._dict.get(key.lower())
        if value_list is None:
            return default
        return [value for _raw_key_unused, value in value_list]

    def add(self, key: str, value: str) -> None:
        self._dict.setdefault(key.lower(), []).append((key, value))

    __setitem__ = add

    def add_all(self, other: HeadersSpec) -> None:
        """
        Add every (key, value) pair from `other`, which can be another `Headers`, a dict, or any iterable of pairs. Existing values
        are kept, so repeated keys accumulate.
        """
        pairs = other.items() if isinstance(other, (Headers, Mapping)) else other
        for key, value in pairs:
            self.add(key, value)

    def setdefault(self, key: str, value: str) -> str:
        existing = self.get(key)
        if existing is not None:
            return existing
        else:
            self.add(key, value)
            return value

    def keys(self) -> Iterator[str]:
        """
        Yields a sequence of all header keys. Case-insensitive duplicates are removed.
        """
        for value_list in self._dict.values():
            yield value_list[0][0]

    __iter__ = keys

    def items(self, normalise_keys: bool = False) -> Iterator[Tuple[str, str]]:
        """
        Yield a sequence of all (key, value) header pairs. Note that unlike a proper dict, the sequence may include duplicated
        keys. With `normalise_keys`, keys are lowercased.
        """
        for normalised_key, value_list in self._dict.items():
            for raw_key, value in value_list:
                yield (normalised_key if normalise_keys else raw_key, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return False
        return sorted(self.items(normalise_keys=True)) == sorted(other.items(normalise_keys=True))

    def __repr__(self) -> str:
        return 'Headers({%s})' % ', '.join(f'{key!r}: {value!r}' for key, value in self.items())


class Method(Enum):
    GET = 'GET'
    PUT = 'PUT'
    POST = 'POST'
    DELETE = 'DELETE'
    OPTIONS = 'OPTIONS'


class Variant(Enum):
    """
    Which of the three request-building strategies applies to a `Request`. Every body class below carries its own tag, and the
    compiler dispatches on that tag alone.
    """

    STANDARD = 'standard'
    BINARY = 'binary'
    MULTIPART = 'multipart'


@dataclass(frozen=True)
class StringPart:
    is_file: ClassVar[bool] = False

    name: str
    value: str


@dataclass(frozen=True)
class FilePart:
    is_file: ClassVar[bool] = True

    name: str
    value: BinaryIO
    file_name: str


Part = Union[StringPart, FilePart]


@dataclass(frozen=True)
class StandardBody:
    """
    Either a raw string `payload`, sent with the given content type and encoding, or, when there is no payload, a set of form
    `parameters` sent URL-encoded. Ignored entirely for GET requests.
    """

    variant: ClassVar[Variant] = Variant.STANDARD

    payload: Optional[str] = None
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    parameters: Mapping = field(default_factory=dict)


@dataclass(frozen=True)
class BinaryBody:
    variant: ClassVar[Variant] = Variant.BINARY

    stream: BinaryIO


@dataclass(frozen=True)
class MultipartBody:
    """
    A multipart/form-data upload. Only one file part is supported: if several are given, all but the first are ignored.
    """

    variant: ClassVar[Variant] = Variant.MULTIPART

    parts: Sequence[Part] = ()


Body = Union[StandardBody, BinaryBody, MultipartBody]


@dataclass(frozen=True)
class Request:
    """
    Description of one HTTP request to the API, as formulated by the caller. Instances are immutable, but note that any stream
    held in the body will be consumed when the request is executed, so a `Request` should only be executed once.

    `method` is normally a `Method`, but a string is accepted too, and mapped when the request is compiled.
    """

    url: str
    method: Union[Method, str] = Method.GET
    headers: Sequence[Tuple[str, str]] = ()
    params: Optional[Mapping] = None
    body: Body = field(default_factory=StandardBody)
    timeout: Optional[timedelta] = None
    follow_redirects: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.headers, (Headers, Mapping)):
            object.__setattr__(self, 'headers', tuple(self.headers.items()))

    @property
    def variant(self) -> Variant:
        return self.body.variant

    def replace(self, **kwargs) -> 'Request':
        return replace(self, **kwargs)


@dataclass
class CompiledRequest:
    """
    The wire-level request, ready to be handed to an engine. This class is considered private to boxwire: a fresh instance is
    compiled from the `Request` for every attempt, since any stream in `data` can only be read once.

    `body_headers` are headers that belong with the body rather than with the message (Content-Type, Content-MD5, ...). They
    are only sent when there is a body.
    """

    url: str
    method: Method
    variant: Variant
    headers: Headers
    body_headers: Headers
    data: Optional[Union[bytes, BinaryIO, Iterable[bytes]]]
    timeout: Optional[timedelta] = None
    follow_redirects: bool = True

    @property
    def data_length(self) -> Optional[int]:
        if isinstance(self.data, bytes):
            return len(self.data)
        # multipart bodies know their length, raw streams we don't try to measure
        return getattr(self.data, 'len', None) or None


class BodyStream:
    """
    An open response body, handed to the caller without having been read. The caller owns it and must close it, which also
    releases the underlying connection. Can be used as a context manager.
    """

    def __init__(self, raw: BinaryIO, on_close: Optional[Callable[[], None]] = None) -> None:
        self._raw = raw
        self._on_close = on_close
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        # urllib3 wants None, not -1, for "read everything"
        return self._raw.read(None if size < 0 else size)  # type: ignore[arg-type]

    def iter_chunks(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                break
            yield chunk

    __iter__ = iter_chunks

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._raw.close()
        finally:
            if self._on_close is not None:
                self._on_close()

    def __enter__(self) -> 'BodyStream':
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()


@dataclass
class RawResponse:
    """
    What an engine hands back: the status line and headers, plus the body either already read into `content` or still open in
    `stream`, depending on which read mode was requested.
    """

    status_code: int
    reason: Optional[str]
    headers: Headers
    content: Optional[bytes] = None
    stream: Optional[BodyStream] = None


T = TypeVar('T')


@dataclass
class Response(Generic[T]):
    """
    Public class for HTTP responses. Exactly one of `text` and `stream` is set. `result` is left empty by this library, it's a
    slot for callers to store whatever they decode the body into.
    """

    request: CompiledRequest
    status_code: int
    reason: Optional[str]
    status: Status
    headers: Headers
    text: Optional[str] = None
    stream: Optional[BodyStream] = None
    result: Optional[T] = None
    num_retries: int = 0

    def __post_init__(self) -> None:
        if (self.text is None) == (self.stream is None):
            raise ValueError('A Response must have exactly one of `text` and `stream`')

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS

    def raise_for_status(self) -> None:
        if 400 <= self.status_code < 600:
            kind = 'Client' if self.status_code < 500 else 'Server'
            raise HttpError(
                f'{self.status_code} {kind} Error: {self.reason} for url: {self.url}',
                response=self,
            )

    def close(self) -> None:
        if self.stream is not None:
            self.stream.close()

    def __enter__(self) -> 'Response[T]':
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()
