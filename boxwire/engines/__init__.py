#!/usr/bin/env python3

# standards
from typing import Union

# boxwire
from .base import Engine
from .register import ALL_ENGINES, register_engine
from .requests import RequestsEngine
from .sessions import SessionFactory


EngineSpec = Union[Engine, str]


def load_engine(spec: EngineSpec) -> Engine:
    if isinstance(spec, Engine):
        return spec
    engine_class = ALL_ENGINES[spec]
    return engine_class()


__all__ = [
    'ALL_ENGINES',
    'Engine',
    'EngineSpec',
    'RequestsEngine',
    'SessionFactory',
    'load_engine',
    'register_engine',
]
