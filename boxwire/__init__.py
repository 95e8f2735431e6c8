#!/usr/bin/env python3

from .client import HttpClient
from .config import Config, SessionPolicy
from .datastructures import (
    BinaryBody,
    BodyStream,
    FilePart,
    Headers,
    Method,
    MultipartBody,
    Request,
    Response,
    StandardBody,
    StringPart,
    Variant,
)
from .engines import Engine, register_engine
from .exceptions import (
    BoxwireException,
    CompileError,
    ConnectionError,
    HttpError,
    Timeout,
    TransportError,
    UnsupportedMethod,
)
from .logs import LOGGER, basic_logging_config
from .status import Status, classify_status

__all__ = [
    "BinaryBody",
    "BodyStream",
    "BoxwireException",
    "CompileError",
    "Config",
    "ConnectionError",
    "Engine",
    "FilePart",
    "Headers",
    "HttpClient",
    "HttpError",
    "LOGGER",
    "Method",
    "MultipartBody",
    "Request",
    "Response",
    "SessionPolicy",
    "StandardBody",
    "Status",
    "StringPart",
    "Timeout",
    "TransportError",
    "UnsupportedMethod",
    "Variant",
    "basic_logging_config",
    "classify_status",
    "register_engine",
]
