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

r"""Common stuff, shared across modules."""

import abc
from typing import Any
from typing import Iterator
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Union

Address = int
Key = int
Value = int
AnyItems = Union[bytes, bytearray, memoryview, Sequence[Value]]  # raw bytes if typed

Block = List[Any]  # typed as Tuple[Address, Address, Buffer]
BlockList = List[List[Any]]  # typed as List[Tuple[Address, Buffer]]

ClosedInterval = Tuple[Address, Address]
IndexEntry = Tuple[Address, Address, Key]

ADDRESS_MAX: Address = (1 << 64) - 1
r"""Highest exclusive end address; the last writable item is one below."""

STR_MAX_CONTENT_SIZE: Address = 1000
r"""Maximum stored content size for string representation."""


class AddressOverflow(ValueError):
    r"""Address range not representable within the 64-bit address space."""


class BorrowError(RuntimeError):
    r"""Structural change attempted while a mutable view is leased."""


class InvariantError(AssertionError):
    r"""Internal consistency broken; the container is no longer usable."""


class ImmutableSparse(abc.ABC):
    r"""Immutable sparse container.

    Items are stored as non-contiguous blocks over a flat unsigned 64-bit
    address space. Only written ranges occupy storage.

    Examples:
        +---+---+---+---+---+---+---+---+---+
        | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
        +===+===+===+===+===+===+===+===+===+
        |   |[A | B | C]|   |[x | y | z]|   |
        +---+---+---+---+---+---+---+---+---+

        >>> from rangesparse.inplace import SparseVec

        >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
        >>> list(vec.ranges())
        [(1, 4), (5, 8)]
        >>> bytes(vec.get(1, 4))
        b'ABC'
    """

    @abc.abstractmethod
    def __bool__(
        self,
    ) -> bool:
        r"""Has any items.

        Returns:
            bool: Has any items.

        Examples:
            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec()
            >>> bool(vec)
            False

            >>> vec.insert(b'Hello', 5)
            >>> bool(vec)
            True
        """
        ...

    @abc.abstractmethod
    def block_span(
        self,
        address: Address,
    ) -> Tuple[Optional[Address], Optional[Address], bool]:
        r"""Span of the block or gap enclosing an address.

        Arguments:
            address (int):
                Reference address.

        Returns:
            tuple: ``(start, endex, covered)``.
            If `address` lies within a block, its boundaries and ``True``.
            Otherwise, the end of the previous block and the start of the
            following one (``None`` where missing), and ``False``.

        Examples:
            +---+---+---+---+---+---+---+---+---+
            | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
            +===+===+===+===+===+===+===+===+===+
            |   |[A | B | C]|   |[x | y | z]|   |
            +---+---+---+---+---+---+---+---+---+

            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> vec.block_span(0)
            (None, 1, False)
            >>> vec.block_span(2)
            (1, 4, True)
            >>> vec.block_span(4)
            (4, 5, False)
            >>> vec.block_span(9)
            (8, None, False)
        """
        ...

    @abc.abstractmethod
    def get(
        self,
        start: Address,
        endex: Address,
    ) -> Optional[memoryview]:
        r"""Read-only view of stored items.

        The whole range must lie within a single stored block.
        Contiguous data is always merged into one block, so a range spanning
        two blocks necessarily crosses a gap.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Returns:
            memoryview: Read-only view over the backing buffer, or ``None``
            if any address within the range was never written.

        Examples:
            +---+---+---+---+---+---+---+---+---+
            | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
            +===+===+===+===+===+===+===+===+===+
            |   |[A | B | C]|   |[x | y | z]|   |
            +---+---+---+---+---+---+---+---+---+

            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> bytes(vec.get(2, 4))
            b'BC'
            >>> vec.get(2, 6) is None
            True
            >>> vec.get(0, 2) is None
            True
        """
        ...

    @abc.abstractmethod
    def overlaps(
        self,
        start: Address,
        endex: Address,
    ) -> bool:
        r"""Checks if any stored range intersects an address range.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Returns:
            bool: Some stored item lies within the range.

        Examples:
            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> vec.overlaps(0, 2)
            True
            >>> vec.overlaps(4, 5)
            False
        """
        ...

    @abc.abstractmethod
    def ranges(
        self,
    ) -> Iterator[ClosedInterval]:
        r"""Iterates over stored ranges.

        Yields:
            couple of addresses: ``(start, endex)`` of each block, ascending.

        Examples:
            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[5, b'xyz'], [1, b'ABC'], [4, b'!']])
            >>> list(vec.ranges())
            [(1, 8)]
        """
        ...

    @abc.abstractmethod
    def stored_len(
        self,
    ) -> int:
        r"""Number of stored items.

        Returns:
            int: Sum of all the block sizes.
        """
        ...

    @abc.abstractmethod
    def to_blocks(
        self,
    ) -> BlockList:
        r"""Exports into blocks.

        Returns:
            list of blocks: ``[start, items]`` copies, sorted by address.
        """
        ...

    @abc.abstractmethod
    def validate(
        self,
    ) -> None:
        r"""Validates internal structure.

        It cross-checks the range index against the block store.

        Raises:
            :obj:`InvariantError`: Inconsistency detected (see message).
        """
        ...


class MutableSparse(ImmutableSparse):
    r"""Mutable sparse container."""

    @abc.abstractmethod
    def get_mut(
        self,
        start: Address,
        endex: Address,
    ):
        r"""Leases a writable view of stored items.

        Context manager yielding a writable :obj:`memoryview`, or ``None``
        under the same conditions as :meth:`ImmutableSparse.get`.
        Structural changes are refused while the lease is active.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Examples:
            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[1, b'ABC']])
            >>> with vec.get_mut(2, 3) as view:
            ...     view[0] = ord('#')
            >>> bytes(vec.get(1, 4))
            b'A#C'
        """
        ...

    @abc.abstractmethod
    def insert(
        self,
        data: Union[AnyItems, Value],
        address: Address,
    ) -> None:
        r"""Writes items.

        New items overwrite any stored ones; adjacent blocks get merged.

        Arguments:
            data (items):
                Items to write, or a single item value.
                With a typecode, bytes-like objects are read as raw machine
                values, so their length must be a multiple of the item size;
                pass a sequence of integers to write plain values.

            address (int):
                Address of the first item.

        Raises:
            :obj:`AddressOverflow`: Range outside the address space.

            :obj:`BorrowError`: A mutable view is currently leased.

        Examples:
            +---+---+---+---+---+---+---+---+---+
            | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
            +===+===+===+===+===+===+===+===+===+
            |   |[A | B | C]|   |[x | y | z]|   |
            +---+---+---+---+---+---+---+---+---+
            |   |[A | B | 1 | 2 | 3 | y | z]|   |
            +---+---+---+---+---+---+---+---+---+

            >>> from rangesparse.inplace import SparseVec

            >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> vec.insert(b'123', 3)
            >>> vec.to_blocks()
            [[1, bytearray(b'AB123yz')]]
        """
        ...
