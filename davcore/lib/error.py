#!/usr/bin/env python
import logging
import os
from collections import defaultdict
from typing import Dict
from typing import List
from typing import Optional
from typing import Type

from davcore import __version__

## Environmental variables prepended with "DAVCORE_" are used both for
## connection parameters and for the debug switches below.
debug_dump_communication = os.environ.get("DAVCORE_COMMDUMP", False)
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("DAVCORE_DEBUGMODE")
if not debugmode:
    if "dev" in __version__:
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davcore")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons) -> None:
    """Log a deviation from what a well-behaved WebDAV server would send"""
    reason = " : ".join(str(x) for x in reasons)
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class PathError(DAVError):
    """
    A protocol level failure: the server answered, but with a status
    code outside of what the operation accepts.  Transport failures
    (connection refused, timeouts, TLS) are never wrapped in this
    class, they are raised as the exceptions from the requests library.

    The op attribute is the operation name (i.e. "PROPFIND" or
    "Authorize"), path is the path given to the operation and status
    is the HTTP status code observed.
    """

    def __init__(
        self, op: str, path: str, status: int, reason: Optional[str] = None
    ) -> None:
        super().__init__(url=path, reason=reason)
        self.op = op
        self.path = path
        self.status = status

    def __str__(self) -> str:
        return "%s %s: %s" % (self.op, self.path, self.status)


class AuthorizationError(PathError):
    """
    The server replied 401 and the client could not (or should not)
    upgrade its credentials any further.
    """

    pass


class PropfindError(PathError):
    pass


class MkcolError(PathError):
    pass


class CopyMoveError(PathError):
    pass


class ConflictError(CopyMoveError):
    """
    COPY or MOVE still returned 409 after the parent collections of the
    destination were created.
    """

    pass


class MultiStatusError(CopyMoveError):
    """
    COPY or MOVE on a collection partially failed.  The responses
    attribute holds the per-resource results from the 207 body that
    did not succeed.
    """

    def __init__(
        self,
        op: str,
        path: str,
        status: int,
        responses: Optional[List] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(op, path, status, reason=reason)
        self.responses = responses or []

    def __str__(self) -> str:
        failed = ", ".join("%s (%s)" % (r.href, r.status) for r in self.responses)
        return "%s %s: %s, failed: %s" % (self.op, self.path, self.status, failed)


exception_by_method: Dict[str, Type[PathError]] = defaultdict(lambda: PathError)
exception_by_method.update(
    {
        "authorize": AuthorizationError,
        "propfind": PropfindError,
        "mkcol": MkcolError,
        "copy": CopyMoveError,
        "move": CopyMoveError,
    }
)
