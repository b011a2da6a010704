# Copyright (c) 2020-2022, Andrea Zoppi.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Streaming utilities."""

import io
from typing import Iterator
from typing import Optional
from typing import Union

from .base import ADDRESS_MAX
from .base import Address
from .base import AnyItems
from .inplace import SparseVec

# Not all the platforms support sparse files natively, thus they do not provide
# os.SEEK_DATA and os.SEEK_HOLE by themselves; we do it here!
SEEK_SET: int = 0
SEEK_CUR: int = 1
SEEK_END: int = 2
SEEK_DATA: int = 3
SEEK_HOLE: int = 4


class SparseIO(io.BufferedIOBase):
    r"""Buffered I/O wrapper.

    This class wraps a byte :obj:`SparseVec` so that observed data can be fed
    and read back like a typical Python I/O stream.

    The stream position (the result of :meth:`tell`) indicates the address
    currently pointed by the stream.
    It is just a number, and as such it is allowed to fall outside the
    stored ranges.

    Arguments:
        vec (:obj:`SparseVec`):
            The byte vector to wrap.
            If ``None``, it assigns a new empty :obj:`SparseVec`.

        seek (int):
            If not ``None``, :meth:`seek` to the absolute address `seek`.

    Attributes:
        _vec (:obj:`SparseVec`):
            The underlying wrapped vector.
            It is set to ``None`` when :attr:`closed`.

        _position (int):
            The current stream position.

    Raises:
        :obj:`ValueError`: The wrapped vector does not store bytes.

    Examples:
        >>> stream = SparseIO(seek=3)
        >>> stream.write(b'Hello')
        5
        >>> stream.seek(10)
        10
        >>> stream.write(b'World!')
        6
        >>> list(stream.vec.ranges())
        [(3, 8), (10, 16)]
        >>> stream.seek(3)
        3
        >>> stream.read()
        b'Hello'
        >>> stream.read()
        -2
        >>> stream.read()
        b'World!'
    """

    def __del__(self) -> None:
        r"""Prepares the object for destruction.

        It makes sure the stream is closed upon object destruction.
        """

        self.close()

    def __enter__(self) -> 'SparseIO':
        r"""Context manager enter function.

        Returns:
            :obj:`SparseIO`: The stream object itself.
        """

        self._check_closed()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        r"""Context manager exit function.

        It makes sure the stream is closed upon context exit.
        """

        self.close()

    def __init__(
        self,
        vec: Optional[SparseVec] = None,
        seek: Optional[Address] = None,
    ):

        if vec is None:
            vec = SparseVec()
        elif vec.typecode is not None:
            raise ValueError('byte vector required')

        self._vec: Optional[SparseVec] = vec
        self._position: Address = 0

        if seek is not None:
            self.seek(seek)

    def __iter__(self) -> Iterator[bytes]:
        r"""Iterates over lines.

        Repeatedly calls :meth:`readline`, skipping memory holes, as long as
        it returns byte strings.

        Yields:
            bytes: Single line; terminator included.

        Examples:
            >>> vec = SparseVec.from_blocks([[3, b'Hello\nWorld!'], [20, b'Bye\n']])
            >>> with SparseIO(vec) as stream:
            ...     lines = [line for line in stream]
            >>> lines
            [b'Hello\n', b'World!', b'Bye\n']
        """

        while 1:
            line = self.readline()
            if isinstance(line, int):
                continue
            if line:
                yield line
            else:
                break

    def __next__(self) -> Union[bytes, Address]:

        return self.readline()

    def _check_closed(self) -> None:
        r"""Checks if the stream is closed.

        Raises:
            ValueError: The stream is closed.
        """

        if self.closed:
            raise ValueError('I/O operation on closed stream.')

    def close(self) -> None:
        r"""Closes the stream.

        The stream no more links to the underlying vector.
        """

        self._vec = None
        self._position = 0

    @property
    def closed(self) -> bool:
        r"""bool: Closed stream."""

        return self._vec is None

    def detach(self) -> None:
        r"""Detaches the underlying raw stream.

        Raises:
            :exc:`io.UnsupportedOperation`: No underlying raw stream.
        """

        raise io.UnsupportedOperation('detach')

    def fileno(self) -> int:
        r"""File descriptor identifier.

        Raises:
            :exc:`io.UnsupportedOperation`: Not a file stream.
        """

        raise io.UnsupportedOperation('fileno')

    def flush(self) -> None:

        pass

    def isatty(self) -> bool:

        return False

    @property
    def vec(self) -> Optional[SparseVec]:
        r""":obj:`SparseVec`: Underlying vector; ``None`` when :attr:`closed`."""

        return self._vec

    def read(
        self,
        size: Optional[Address] = -1,
    ) -> Union[bytes, Address]:
        r"""Reads a chunk of bytes.

        Starting from the current stream position, this method tries to read up
        to `size` bytes (or as much as possible if negative or ``None``).

        The number of bytes can be less than `size` in the case a memory hole
        or the end are encountered.

        If the current stream position lies within a memory gap, this method
        returns the negative amount of bytes to reach the next data block,
        moving there.

        If the current stream position is after the end of stored data, this
        method returns an empty byte string.

        Arguments:
            size (int):
                Number of bytes to read.
                If negative or ``None``, read as many bytes as possible.

        Returns:
            bytes: Chunk of up to `size` bytes.

        Examples:
            >>> vec = SparseVec.from_blocks([[3, b'Hello'], [10, b'World!']])
            >>> stream = SparseIO(vec, seek=4)
            >>> stream.read(1)
            b'e'
            >>> stream.read(99)
            b'llo'
            >>> stream.read()
            -2
            >>> stream.tell()
            10
        """

        if size is None:
            size = -1
        self._check_closed()
        start = self._position
        vec = self._vec
        _, block_endex, covered = vec.block_span(start)

        if not covered:
            if block_endex is None:
                return b''
            else:
                self._position = block_endex
                return start - block_endex

        if size < 0:
            endex = block_endex
        else:
            endex = start + size
            if endex > block_endex:
                endex = block_endex

        chunk = bytes(vec.get(start, endex))
        self._position = endex
        return chunk

    read1 = read

    def readable(self) -> bool:

        self._check_closed()
        return True

    def readinto(
        self,
        buffer: Union[bytearray, memoryview],
    ) -> int:
        r"""Reads data into a byte buffer.

        Reading stops at the first memory hole or at the end of stored data.

        Arguments:
            buffer (bytearray):
                Pre-allocated buffer to fill.

        Returns:
            int: Number of bytes read.
        """

        self._check_closed()
        chunk = self.read(len(buffer))
        if isinstance(chunk, int):
            self._position += chunk  # stay before the hole
            return 0

        size = len(chunk)
        buffer[:size] = chunk
        return size

    readinto1 = readinto

    def readline(
        self,
        size: Optional[Address] = -1,
    ) -> Union[bytes, Address]:
        r"""Reads a line.

        Like :meth:`read`, but stopping after the first ``b'\n'``.

        Arguments:
            size (int):
                Maximum number of bytes to read.
                If negative or ``None``, no limit is applied.

        Returns:
            bytes: Line read; terminator included.
        """

        if size is None:
            size = -1
        self._check_closed()
        start = self._position
        _, block_endex, covered = self._vec.block_span(start)

        if not covered:
            return self.read(size)

        view = self._vec.get(start, block_endex)
        found = bytes(view).find(b'\n')
        if found >= 0 and (size < 0 or found < size):
            size = found + 1
        return self.read(size)

    def seek(
        self,
        offset: Address,
        whence: int = SEEK_SET,
    ) -> Address:
        r"""Changes the current stream position.

        The `whence` can be any of:

        * :const:`SEEK_SET` (``0``): referring to the absolute address 0.

        * :const:`SEEK_CUR` (``1``): referring to the current position.

        * :const:`SEEK_END` (``2``): referring to the end of stored data.

        * :const:`SEEK_DATA` (``3``): if `offset` lies within a memory hole,
          it moves to the beginning of the next data block.

        * :const:`SEEK_HOLE` (``4``): if `offset` lies within a data block,
          it moves to the end of that block.

        Arguments:
            offset (int):
                Position offset to apply.

            whence (int):
                Where the offset is referred.

        Returns:
            int: The updated stream position.

        Raises:
            :obj:`ValueError`: Invalid `whence`.

        Examples:
            >>> vec = SparseVec.from_blocks([[3, b'Hello'], [12, b'World!']])
            >>> stream = SparseIO(vec)
            >>> stream.seek(-3, SEEK_END)
            15
            >>> stream.seek(1)
            1
            >>> stream.seek(stream.tell(), SEEK_DATA)
            3
            >>> stream.seek(stream.tell(), SEEK_HOLE)
            8
        """

        self._check_closed()

        if whence == SEEK_SET:
            self._position = offset

        elif whence == SEEK_CUR:
            self._position += offset

        elif whence == SEEK_END:
            endex, _, _ = self._vec.block_span(ADDRESS_MAX)
            self._position = (endex or 0) + offset

        elif whence == SEEK_DATA:
            _, block_endex, covered = self._vec.block_span(offset)
            if not covered and block_endex is not None:
                self._position = block_endex

        elif whence == SEEK_HOLE:
            _, block_endex, covered = self._vec.block_span(offset)
            if covered:
                self._position = block_endex
        else:
            raise ValueError('invalid whence')
        return self._position

    def seekable(self) -> bool:

        self._check_closed()
        return True

    def tell(self) -> Address:
        r"""Current stream position.

        Returns:
            int: Current stream position.
        """

        self._check_closed()
        return self._position

    def truncate(
        self,
        size: Optional[Address] = None,
    ) -> Address:

        raise io.UnsupportedOperation('truncate')

    def writable(self) -> bool:

        self._check_closed()
        return True

    def write(
        self,
        buffer: AnyItems,
    ) -> int:
        r"""Writes data into the stream.

        Data is inserted into the underlying vector at the current stream
        position, which is then moved after the written data.

        Arguments:
            buffer (bytes):
                Byte data to write at the current stream position.
                Objects with wider items are written as their raw bytes.

        Returns:
            int: Number of bytes written.

        Examples:
            >>> vec = SparseVec.from_blocks([[3, b'Hello'], [10, b'World!']])
            >>> stream = SparseIO(vec, seek=10)
            >>> stream.write(b'Human')
            5
            >>> vec.to_blocks()
            [[3, bytearray(b'Hello')], [10, bytearray(b'Human!')]]
            >>> stream.tell()
            15
        """

        self._check_closed()
        if isinstance(buffer, int):
            buffer = (buffer,)
        data = bytearray(buffer)
        size = len(data)
        self._vec.insert(data, self._position)
        self._position += size
        return size
