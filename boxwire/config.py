#!/usr/bin/env python3

# standards
from dataclasses import dataclass, fields
from datetime import timedelta
from enum import Enum
from typing import Dict, Optional, Tuple

# boxwire
from .datastructures import Headers
from .version import BOXWIRE_VERSION


class SessionPolicy(Enum):
    """
    Whether each send gets its own brand new `requests.Session` (and therefore its own connections), or whether a single session
    is kept by the engine and reused across sends.
    """

    PER_CALL = 'per-call'
    POOLED = 'pooled'


@dataclass
class Config:
    headers: Optional[Headers] = None
    max_retries: int = 3
    proxies: Optional[Dict[str, str]] = None
    retry_fallback_delay: timedelta = timedelta(milliseconds=2000)
    session_policy: SessionPolicy = SessionPolicy.PER_CALL
    user_agent: Optional[str] = f"boxwire/{BOXWIRE_VERSION}"
    verify: Optional[bool] = True

    @classmethod
    def build(cls, **kwargs: object) -> "Config":
        # This pre-converts data before the constructor gets called
        if kwargs.get("headers") is not None and not isinstance(kwargs["headers"], Headers):
            kwargs["headers"] = Headers(kwargs["headers"])  # type: ignore[arg-type]
        if isinstance(kwargs.get("session_policy"), str):
            kwargs["session_policy"] = SessionPolicy(kwargs["session_policy"])
        return cls(**kwargs)  # type: ignore[arg-type]

    def derive_using_kwargs(self, **kwargs: object) -> Tuple["Config", Dict[str, object]]:
        # NB this must always return a new instance, so that the caller can modify it without affecting the original
        self_asdict = {f.name: getattr(self, f.name) for f in fields(self)}
        for key in self_asdict:
            if key in kwargs:
                if key == "headers" and self.headers:
                    new_value = Headers(self.headers)
                    new_value.add_all(kwargs.pop("headers"))  # type: ignore[arg-type]
                else:
                    new_value = kwargs.pop(key)  # type: ignore[assignment]
                self_asdict[key] = new_value
        config = Config.build(**self_asdict)
        return config, kwargs
