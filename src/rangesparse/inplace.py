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

r"""In-place implementation.

This implementation in pure Python uses the basic :class:`bytearray` data type
(or :class:`array.array` for wider items) to hold block data.
"""

import logging
from array import array
from contextlib import contextmanager
from itertools import count as _count
from operator import index as _int_index
from typing import Any
from typing import Iterable
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

from .base import ADDRESS_MAX
from .base import STR_MAX_CONTENT_SIZE
from .base import Address
from .base import AddressOverflow
from .base import AnyItems
from .base import BlockList
from .base import BorrowError
from .base import ClosedInterval
from .base import InvariantError
from .base import Key
from .base import MutableSparse
from .base import Value
from .blockstore import BlockStore
from .rangeindex import RangeIndex

_logger = logging.getLogger(__name__)


def collapse_blocks(
    blocks: Iterable[Tuple[Address, AnyItems]],
    typecode: Optional[str] = None,
) -> BlockList:
    r"""Collapses a generic sequence of blocks.

    Given a generic sequence of blocks, writes them in the same order,
    generating a new sequence of non-contiguous blocks, sorted by address.

    Arguments:
        blocks (sequence of blocks):
            Sequence of ``[start, items]`` blocks to collapse.

        typecode (str):
            Item type, as per :class:`SparseVec`.

    Returns:
        list of blocks: Collapsed block list.

    Examples:
        +---+---+---+---+---+---+---+---+---+---+
        | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 | 9 |
        +===+===+===+===+===+===+===+===+===+===+
        |[0 | 1 | 2]|   |   |   |   |   |   |   |
        +---+---+---+---+---+---+---+---+---+---+
        |   |   |   |   |[A | B]|   |   |   |   |
        +---+---+---+---+---+---+---+---+---+---+
        |   |   |   |   |   |   |[x | y | z]|   |
        +---+---+---+---+---+---+---+---+---+---+
        |   |[$]|   |   |   |   |   |   |   |   |
        +---+---+---+---+---+---+---+---+---+---+
        |[0 | $ | 2]|   |[A | B | x | y | z]|   |
        +---+---+---+---+---+---+---+---+---+---+

        >>> blocks = [
        ...     [0, b'012'],
        ...     [4, b'AB'],
        ...     [6, b'xyz'],
        ...     [1, b'$'],
        ... ]
        >>> collapse_blocks(blocks)
        [[0, bytearray(b'0$2')], [4, bytearray(b'ABxyz')]]
    """

    return SparseVec.from_blocks(blocks, typecode=typecode).to_blocks()


class SparseVec(MutableSparse):
    r"""Sparse vector over a 64-bit address space.

    Written ranges are stored as blocks of items; overlapping writes follow
    last-write-wins, contiguous blocks are merged.

    Each block is linked to the address space by a storage key, allocated from
    a counter that never goes back. The range index maps address ranges to
    keys, while the block store maps keys to buffers.

    Attributes:
        _index (:obj:`RangeIndex`):
            Stored address ranges and their keys.

        _store (:obj:`BlockStore`):
            Blocks, by key.

        _keys (iterator of int):
            Storage key allocator.

        _leases (int):
            Number of active :meth:`get_mut` leases.

    Arguments:
        typecode (str):
            Item type as per :mod:`array`; ``None`` for bytes.

        validate (bool):
            Validates the internal structure after each :meth:`insert`.

    Raises:
        :obj:`ValueError`: Invalid `typecode`.

    Examples:
        >>> vec = SparseVec()
        >>> vec.insert(b'Hello', 5)
        >>> vec.to_blocks()
        [[5, bytearray(b'Hello')]]

        >>> vec = SparseVec('Q')
        >>> vec.insert([1, 2, 3], 0xFFFF_0000)
        >>> vec.get(0xFFFF_0001, 0xFFFF_0003).tolist()
        [2, 3]
    """

    def __init__(
        self,
        typecode: Optional[str] = None,
        validate: bool = False,
    ):

        if typecode is not None:
            array(typecode)  # raises on unsupported typecodes

        self._typecode: Optional[str] = typecode
        self._validate: bool = validate
        self._index: RangeIndex = RangeIndex()
        self._store: BlockStore = BlockStore()
        self._keys: Iterator[Key] = _count()
        self._leases: int = 0

    @classmethod
    def from_blocks(
        cls,
        blocks: Iterable[Tuple[Address, AnyItems]],
        typecode: Optional[str] = None,
        validate: bool = False,
    ) -> 'SparseVec':
        r"""Creates a sparse vector from blocks.

        Blocks are inserted in the given order, so later blocks win where
        they overlap earlier ones.

        Arguments:
            blocks (sequence of blocks):
                Sequence of ``[start, items]`` blocks.

            typecode (str):
                Item type as per :mod:`array`; ``None`` for bytes.

            validate (bool):
                Validates the internal structure after each insertion.

        Returns:
            :obj:`SparseVec`: The created object.

        Examples:
            >>> vec = SparseVec.from_blocks([[1, b'ABC'], [5, b'xyz']])
            >>> list(vec.ranges())
            [(1, 4), (5, 8)]
        """

        vec = cls(typecode=typecode, validate=validate)
        for block_start, block_data in blocks:
            vec.insert(block_data, block_start)
        return vec

    def __bool__(
        self,
    ) -> bool:

        return bool(self._index)

    def __eq__(
        self,
        other: Any,
    ) -> bool:
        r"""Equality comparison.

        Two sparse vectors are equal when they store the same ranges, with
        equal item values; keys and item types are not compared.
        """

        if not isinstance(other, SparseVec):
            return NotImplemented

        if list(self.ranges()) != list(other.ranges()):
            return False

        store1 = self._store
        store2 = other._store
        for (_, _, key1), (_, _, key2) in zip(self._index, other._index):
            if list(store1[key1][2]) != list(store2[key2][2]):
                return False
        return True

    def __repr__(
        self,
    ) -> str:

        index = self._index
        if index:
            start = f'0x{next(iter(index))[0]:X}'
            endex = f'0x{index.previous(ADDRESS_MAX + 1)[1]:X}'
        else:
            start = endex = ''
        return f'<{type(self).__name__}[{start}:{endex}]@0x{id(self):X}>'

    def __str__(
        self,
    ) -> str:
        r"""String representation.

        If :meth:`stored_len` is lesser than ``STR_MAX_CONTENT_SIZE``, then
        the vector is represented as a list of blocks.

        If exceeding, it is equivalent to :meth:`__repr__`.

        Returns:
            str: String representation.
        """

        if self.stored_len() < STR_MAX_CONTENT_SIZE:
            return repr(self.to_blocks())
        else:
            return repr(self)

    @property
    def typecode(
        self,
    ) -> Optional[str]:
        r"""str: Item type as per :mod:`array`; ``None`` for bytes."""

        return self._typecode

    def _buffer(
        self,
        data: Union[AnyItems, Value],
    ):

        if isinstance(data, Value):
            data = (data,)

        typecode = self._typecode
        if typecode is None:
            return bytearray(data)
        else:
            return array(typecode, data)

    def _view(
        self,
        start: Address,
        endex: Address,
    ) -> Optional[memoryview]:

        if endex < start:
            return None

        entry = self._index.at(start)
        if entry is None:
            return None

        block_start, block_endex, key = entry
        if block_endex < endex:
            return None

        block_data = self._store[key][2]
        return memoryview(block_data)[(start - block_start):(endex - block_start)]

    def block_span(
        self,
        address: Address,
    ) -> Tuple[Optional[Address], Optional[Address], bool]:

        index = self._index
        entry = index.at(address)
        if entry is not None:
            return entry[0], entry[1], True

        previous = index.previous(address)
        following = index.following(address)
        return (
            None if previous is None else previous[1],
            None if following is None else following[0],
            False,
        )

    def get(
        self,
        start: Address,
        endex: Address,
    ) -> Optional[memoryview]:

        view = self._view(start, endex)
        return None if view is None else view.toreadonly()

    @contextmanager
    def get_mut(
        self,
        start: Address,
        endex: Address,
    ):

        view = self._view(start, endex)
        if view is None:
            yield None
            return

        self._leases += 1
        try:
            yield view
        finally:
            self._leases -= 1
            view.release()

    def overlaps(
        self,
        start: Address,
        endex: Address,
    ) -> bool:

        return self._index.overlaps(start, endex)

    def ranges(
        self,
    ) -> Iterator[ClosedInterval]:

        for start, endex, _ in self._index:
            yield start, endex

    def stored_len(
        self,
    ) -> int:

        store = self._store
        return sum(len(store[key][2]) for _, _, key in self._index)

    def to_blocks(
        self,
    ) -> BlockList:

        store = self._store
        return [[start, store[key][2][:]] for start, _, key in self._index]

    def insert(
        self,
        data: Union[AnyItems, Value],
        address: Address,
    ) -> None:

        buffer = self._buffer(data)
        size = len(buffer)
        if not size:
            return

        if self._leases:
            raise BorrowError('mutable view leased')

        start = _int_index(address)
        endex = start + size
        if start < 0 or endex > ADDRESS_MAX:
            raise AddressOverflow('address out of range')

        index = self._index
        store = self._store

        # Split any block enclosing both ends of the written range
        key = index.key_at(start)
        if key is not None and key == index.key_at(endex):
            block_start, block_endex, block_data = store[key]

            upper_key = next(self._keys)
            upper_data = block_data[(endex - block_start):]
            index.insert(endex, block_endex, upper_key)
            store.insert(upper_key, endex, block_endex, upper_data)

            if block_start < start:
                index.remove(start, endex)
                store.resize(key, block_start, start)

            _logger.debug('split block %d at [0x%X:0x%X) into %d', key, start, endex, upper_key)

        # Write as a standalone block
        key = next(self._keys)
        index.insert(start, endex, key)
        store.insert(key, start, endex, buffer)

        # Align blocks to their clipped ranges
        for range_start, range_endex, range_key in index:
            block = store[range_key]
            if block[0] != range_start or block[1] != range_endex:
                store.resize(range_key, range_start, range_endex)

        # Merge with contiguous neighbors
        following = index.at(endex)
        if following is not None:
            self._merge(key, following[2])

        if start:
            previous = index.at(start - 1)
            if previous is not None:
                self._merge(previous[2], key)

        garbage = store.retain(index.keys().__contains__)
        if garbage:
            _logger.debug('collected %d orphaned blocks', garbage)

        if self._validate:
            self.validate()

    def _merge(
        self,
        lower_key: Key,
        upper_key: Key,
    ) -> None:

        index = self._index
        store = self._store
        lower = store[lower_key]
        upper = store.remove(upper_key)

        index.discard(upper[0])
        lower[2] = lower[2] + upper[2]
        lower[1] = upper[1]
        index.insert(lower[0], lower[1], lower_key)

        _logger.debug('merged block %d into %d', upper_key, lower_key)

    def validate(
        self,
    ) -> None:

        store = self._store
        keys = set()
        previous_endex = None

        for start, endex, key in self._index:
            if endex <= start:
                raise InvariantError('invalid range')

            if previous_endex is not None:
                if start < previous_endex:
                    raise InvariantError('overlapping ranges')
                if start == previous_endex:
                    raise InvariantError('adjacent ranges')

            if key in keys:
                raise InvariantError('duplicate block key')
            keys.add(key)

            block = store.get(key)
            if block is None:
                raise InvariantError('missing block')

            block_start, block_endex, block_data = block
            if block_start != start or block_endex != endex:
                raise InvariantError('block range mismatch')

            if len(block_data) != endex - start:
                raise InvariantError('block size mismatch')

            previous_endex = endex

        for key in store:
            if key not in keys:
                raise InvariantError('orphaned block')
