# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Code for reading from and writing to handles (PRIVATE).

StreamBuffer wraps anything with a read method (or a bytes object) in a
growable ring buffer, so that the GenBank tokenizer can work on a window of
unconsumed bytes without loading the whole file into memory.  This is the
only place in Gbio where the byte source is read.
"""

import io
import logging

from Gbio import EndOfInput


DEFAULT_CHUNK_SIZE = 64 * 1024


class StreamBuffer:
    """Growable ring buffer over a byte source.

    Bytes are appended at the tail by fill() and removed from the head by
    consume().  Space freed by consume() is reused by later fills, wrapping
    around the end of the underlying bytearray, so data is only moved when
    the ring has to grow.

    >>> buf = StreamBuffer(b"LOCUS\\n//\\n", chunk_size=4)
    >>> buf.request(6)
    >>> buf.find(b"\\n")
    5
    >>> buf.read(6)
    b'LOCUS\\n'
    >>> buf.offset
    6

    Asking for more than the source holds raises EndOfInput:

    >>> buf.request(10)
    Traceback (most recent call last):
       ...
    Gbio.EndOfInput: wanted 10 bytes, only 3 left in source

    """

    def __init__(self, source, chunk_size=DEFAULT_CHUNK_SIZE, capacity=None):
        """Initialize the buffer.

        Arguments:
         - source - object with a read(n) method returning bytes (text
           handles are accepted, their data is encoded as UTF-8), or a
           bytes-like object.
         - chunk_size - maximum number of bytes asked from the source by
           a single fill() call.
         - capacity - initial size of the ring (defaults to chunk_size).

        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        if not hasattr(source, "read"):
            raise TypeError(
                "Expected a bytes object or a handle, got %r" % type(source).__name__
            )
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive, not %r" % chunk_size)
        self._source = source
        self.chunk_size = chunk_size
        self._ring = bytearray(capacity or chunk_size)
        self._head = 0
        self._size = 0
        self.eof = False
        self.offset = 0

    def __len__(self):
        """Return the number of buffered, unconsumed bytes."""
        return self._size

    @property
    def capacity(self):
        """Current size of the ring."""
        return len(self._ring)

    def _grow(self, minimum):
        capacity = len(self._ring)
        while capacity < minimum:
            capacity *= 2
        logging.debug("Growing stream buffer to %i bytes", capacity)
        ring = bytearray(capacity)
        ring[: self._size] = self.window()
        self._ring = ring
        self._head = 0

    def fill(self):
        """Read one chunk from the source into the free space of the ring.

        Returns the number of bytes read, zero once the source is exhausted.
        The ring is doubled when it has no free space left.
        """
        if self.eof:
            return 0
        if self._size == len(self._ring):
            self._grow(len(self._ring) * 2)
        capacity = len(self._ring)
        if self._size == 0:
            self._head = 0
        tail = (self._head + self._size) % capacity
        if tail >= self._head:
            free = capacity - tail
        else:
            free = self._head - tail
        data = self._source.read(min(free, self.chunk_size))
        if isinstance(data, str):
            data = data.encode("utf-8", "surrogateescape")
        if not data:
            self.eof = True
            return 0
        if len(data) > free:
            # Text handles count characters, not encoded bytes
            self._grow(2 * (self._size + len(data)))
            tail = self._size
        self._ring[tail : tail + len(data)] = data
        self._size += len(data)
        return len(data)

    def request(self, min_bytes):
        """Make sure at least min_bytes unconsumed bytes are buffered.

        Raises EndOfInput if the source runs dry first; whatever was
        buffered stays available.
        """
        while self._size < min_bytes:
            if self.eof:
                raise EndOfInput(
                    "wanted %i bytes, only %i left in source" % (min_bytes, self._size)
                )
            if min_bytes > len(self._ring):
                self._grow(min_bytes)
            self.fill()

    def window(self):
        """Return a copy of all unconsumed bytes as one contiguous bytes object."""
        end = self._head + self._size
        capacity = len(self._ring)
        if end <= capacity:
            return bytes(self._ring[self._head : end])
        return bytes(self._ring[self._head :]) + bytes(self._ring[: end - capacity])

    def find(self, byte, start=0):
        """Return the index of byte among the unconsumed bytes, or -1.

        The index is relative to the read cursor. Only single byte needles
        are supported, which is all the tokenizer needs (newlines).
        """
        if len(byte) != 1:
            raise ValueError("Can only search for a single byte")
        if start >= self._size:
            return -1
        capacity = len(self._ring)
        first = self._head + start
        end = self._head + self._size
        if first >= capacity:
            index = self._ring.find(byte, first - capacity, end - capacity)
            return -1 if index == -1 else index + capacity - self._head
        index = self._ring.find(byte, first, min(end, capacity))
        if index != -1:
            return index - self._head
        if end > capacity:
            index = self._ring.find(byte, 0, end - capacity)
            if index != -1:
                return index + capacity - self._head
        return -1

    def peek(self, n):
        """Return (without consuming) up to n unconsumed bytes."""
        n = min(n, self._size)
        end = self._head + n
        capacity = len(self._ring)
        if end <= capacity:
            return bytes(self._ring[self._head : end])
        return bytes(self._ring[self._head :]) + bytes(self._ring[: end - capacity])

    def consume(self, n):
        """Advance the read cursor by n bytes."""
        if n < 0 or n > self._size:
            raise ValueError(
                "Cannot consume %i bytes, only %i buffered" % (n, self._size)
            )
        self._head = (self._head + n) % len(self._ring)
        self._size -= n
        self.offset += n
        if self._size == 0:
            self._head = 0

    def read(self, n):
        """Return up to n unconsumed bytes and consume them."""
        data = self.peek(n)
        self.consume(len(data))
        return data

    def readline(self):
        """Return the next line including its newline, or b"" at the end.

        If no newline is buffered yet, more data is requested from the source
        before trying again, so a line crossing a refill boundary comes back
        in one piece. The last line of a source may lack the newline.
        """
        searched = 0
        while True:
            index = self.find(b"\n", searched)
            if index != -1:
                return self.read(index + 1)
            searched = self._size
            try:
                self.request(self._size + 1)
            except EndOfInput:
                return self.read(self._size)
