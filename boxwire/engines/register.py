#!/usr/bin/env python3

# standards
from typing import Dict, Type, TypeVar

# boxwire
from .base import Engine


ALL_ENGINES: Dict[str, Type[Engine]] = {}

E = TypeVar('E', bound=Type[Engine])


def register_engine(engine_class: E) -> E:
    """
    Make `engine_class` available by its `id`, so that e.g. `HttpClient(engine='requests')` works. Returns the class, so this
    can be used as a class decorator.
    """
    existing = ALL_ENGINES.get(engine_class.id)
    if existing is not None and existing is not engine_class:
        raise ValueError(f'Engine id {engine_class.id!r} is already taken by {existing.__name__}')
    ALL_ENGINES[engine_class.id] = engine_class
    return engine_class
