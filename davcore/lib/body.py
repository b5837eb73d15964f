"""
Request bodies that can be sent more than once.

When the first attempt of a request is answered with a 401 and the
client upgrades its credentials, the request is sent again, and the
body has to be sent again with it.  Three kinds of bodies are handled:

* str and bytes are immutable and simply sent again.
* Seekable streams (files, io.BytesIO) are rewound to offset 0 before
  every attempt.
* Anything else with a read method is read from exactly once.  While
  the first attempt is sent, every chunk read is copied into a buffer,
  and later attempts send the buffer instead of the exhausted stream.
"""
import io
import logging
from typing import IO
from typing import Iterator
from typing import Optional
from typing import Union

log = logging.getLogger("davcore")

CHUNK_SIZE = 64 * 1024

Body = Union[str, bytes, IO]


class TeeReader:
    """
    Wraps a non-seekable stream.  Everything read through the wrapper
    is duplicated into ``buffer``.

    The wrapper is iterable so that requests streams it with chunked
    transfer encoding rather than trying to determine its length.
    """

    def __init__(self, source: IO, buffer: io.BytesIO) -> None:
        self.source = source
        self.buffer = buffer
        self.exhausted = False

    def read(self, size: int = -1) -> bytes:
        data = self.source.read(size)
        if isinstance(data, str):
            data = data.encode("utf-8")
        if data:
            self.buffer.write(data)
        elif size != 0:
            self.exhausted = True
        return data

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(CHUNK_SIZE)
            if not chunk:
                return
            yield chunk

    def drain(self) -> None:
        """Copy whatever the first attempt did not consume into the buffer"""
        while not self.exhausted:
            self.read(CHUNK_SIZE)


def _is_seekable(body) -> bool:
    seekable = getattr(body, "seekable", None)
    if seekable is not None:
        return seekable()
    return hasattr(body, "seek")


class ReplayableBody:
    """
    The replay buffer for one logical request.  Call ``rewind()``
    before every attempt and send what it returns.
    """

    def __init__(self, body: Body) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.original = body
        self._tee: Optional[TeeReader] = None
        self._replay: Optional[io.BytesIO] = None
        self.attempts = 0
        if isinstance(body, bytes):
            self.kind = "immutable"
        elif _is_seekable(body):
            self.kind = "seekable"
        else:
            self.kind = "stream"

    @classmethod
    def wrap(cls, body: Optional[Body]) -> Optional["ReplayableBody"]:
        if body is None:
            return None
        return cls(body)

    def rewind(self) -> Union[Body, TeeReader, io.BytesIO]:
        """
        The object to send in the next attempt.  For seekable bodies
        this seeks to the start, and an error from seek propagates to
        the caller.
        """
        self.attempts += 1
        if self.kind == "immutable":
            return self.original
        if self.kind == "seekable":
            self.original.seek(0, io.SEEK_SET)
            return self.original
        if self._tee is None:
            self._tee = TeeReader(self.original, io.BytesIO())
            return self._tee
        if self._replay is None:
            ## Never go back to the original stream.  What the first
            ## attempt did not send is pulled into the buffer once.
            self._tee.drain()
            self._replay = self._tee.buffer
            log.debug(
                "replaying %i buffered body bytes" % len(self._replay.getvalue())
            )
        self._replay.seek(0, io.SEEK_SET)
        return self._replay

    @property
    def buffered(self) -> Optional[bytes]:
        """The bytes captured from a non-seekable stream so far"""
        if self._tee is None:
            return None
        return self._tee.buffer.getvalue()
