"""Bounded buffers.

Two helpers that replace pointer and remaining-length bookkeeping:

  - :class:`Writer` is an output cursor over a caller supplied buffer.
    Every write is checked against the remaining capacity before any
    byte is touched, and the last byte of the buffer is held back for
    the NUL terminator.

  - :class:`Scratch` is a shrinking arena. Allocations hand out
    ``memoryview`` slices of one backing ``bytearray`` and
    :attr:`Scratch.remaining` reports what is left, so several calls
    can draw from the same pool without double counting.

"""
import logging
from typing import Optional
from typing import Union

import josepy as jose

from jwecore import constants
from jwecore import errors
from jwecore import util

logger = logging.getLogger(__name__)

Buffer = Union[bytearray, memoryview]


class Writer:
    """Fail-closed output cursor.

    :ivar memoryview out: The whole destination buffer.

    """

    def __init__(self, out: Buffer, reserve: int = len(constants.NUL)) -> None:
        self.out = memoryview(out).cast('B')
        if self.out.readonly:
            raise TypeError('Output buffer must be writable')
        self._reserve = reserve
        self._pos = 0

    @property
    def remaining(self) -> int:
        """Bytes that can still be written, terminator excluded."""
        return max(len(self.out) - self._reserve - self._pos, 0)

    def tell(self) -> int:
        """Number of bytes written so far."""
        return self._pos

    def _check(self, size: int) -> None:
        if size > self.remaining:
            raise errors.BufferTooSmall(size, self.remaining)

    def write(self, data: bytes) -> memoryview:
        """Write ``data``.

        :returns: View of the written region.
        :raises .BufferTooSmall: if ``data`` does not fit

        """
        size = len(data)
        self._check(size)
        start = self._pos
        self.out[start:start + size] = data
        self._pos += size
        return self.out[start:self._pos]

    def write_b64(self, data: Union[bytes, memoryview]) -> memoryview:
        """Write JOSE Base64 encoding of ``data``.

        The encoded length is checked before encoding.

        :returns: View of the encoded region.

        """
        self._check(util.b64_length(len(data)))
        return self.write(jose.b64encode(bytes(data)))

    def terminate(self) -> int:
        """Write the NUL terminator.

        :returns: Length of the output, terminator not included.

        """
        if len(self.out) - self._pos < len(constants.NUL):
            raise errors.BufferTooSmall(len(constants.NUL), 0)
        self.out[self._pos:self._pos + len(constants.NUL)] = constants.NUL
        return self._pos


class Scratch:
    """Shrinking scratch arena.

    :param int size: Size of a freshly allocated backing store. Ignored
        if ``buf`` is given.
    :param buf: Caller owned backing store.

    """

    def __init__(self, size: int = constants.DEFAULT_SCRATCH_SIZE,
                 buf: Optional[bytearray] = None) -> None:
        self._buf = memoryview(bytearray(size) if buf is None else buf).cast('B')
        self._used = 0

    @classmethod
    def sized_for(cls, payload_length: int) -> 'Scratch':
        """Arena large enough for one cycle over ``payload_length`` bytes."""
        return cls(payload_length + constants.SCRATCH_OVERHEAD)

    @property
    def capacity(self) -> int:
        """Total size of the arena."""
        return len(self._buf)

    @property
    def remaining(self) -> int:
        """Bytes not yet handed out."""
        return len(self._buf) - self._used

    def allocate(self, size: int) -> memoryview:
        """Carve ``size`` bytes out of the arena.

        :raises .BufferTooSmall: if the arena is exhausted

        """
        if size > self.remaining:
            logger.debug('Scratch exhausted: %d requested, %d left',
                         size, self.remaining)
            raise errors.BufferTooSmall(size, self.remaining)
        view = self._buf[self._used:self._used + size]
        self._used += size
        return view

    def store(self, data: Union[bytes, memoryview]) -> memoryview:
        """Copy ``data`` into the arena and return the view holding it."""
        view = self.allocate(len(data))
        view[:] = data
        return view

    def reset(self) -> None:
        """Give all allocations back. Earlier views must not be used."""
        self._used = 0
