#!/usr/bin/env python3

# standards
from threading import Lock
from typing import Callable, Optional

# 3rd parties
import requests

# boxwire
from ..config import SessionPolicy


# Only these two, whatever else `requests` might support depending on what's installed
ACCEPT_ENCODING = 'gzip, deflate'


def build_session() -> requests.Session:
    """
    Create a transport client. Timeouts, redirects, TLS verification and proxies are all given per send, so the only thing
    configured on the session itself is the compression we accept. Decompression of whatever comes back is then automatic.
    """
    session = requests.Session()
    session.headers['Accept-Encoding'] = ACCEPT_ENCODING
    return session


class SessionFactory:
    """
    Hands out the `requests.Session` to use for one send, according to a `SessionPolicy`:

      * `PER_CALL`: a new session for every send, including every retry of the same request. Nothing is reused, so no
        connection is ever shared between two sends, at the cost of a new TCP (and TLS) handshake each time.

      * `POOLED`: one session, created on first use and then shared by every send that uses this policy, along with its
        connection pool.

    Every `acquire` must be matched by a `release` once the response body has been consumed.
    """

    def __init__(self, build: Callable[[], requests.Session] = build_session) -> None:
        self.build = build
        self.pooled: Optional[requests.Session] = None
        self.lock = Lock()

    def acquire(self, policy: SessionPolicy) -> requests.Session:
        if policy is SessionPolicy.PER_CALL:
            return self.build()
        with self.lock:
            if self.pooled is None:
                self.pooled = self.build()
            return self.pooled

    def release(self, session: requests.Session, policy: SessionPolicy) -> None:
        if policy is SessionPolicy.PER_CALL:
            session.close()

    def close(self) -> None:
        with self.lock:
            if self.pooled is not None:
                self.pooled.close()
                self.pooled = None
