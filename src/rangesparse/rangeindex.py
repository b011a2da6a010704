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

r"""Ordered index of non-overlapping address ranges.

Each range is associated to an opaque storage key.
The index owns no item data: it only tells which key covers which addresses.

+---+---+---+---+---+---+---+---+---+---+---+---+
| 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 | 9 | 10| 11|
+===+===+===+===+===+===+===+===+===+===+===+===+
|   |[0 | 0 | 0 | 0]|   |[1]|   |[2 | 2 | 2]|   |
+---+---+---+---+---+---+---+---+---+---+---+---+

>>> index = RangeIndex()
>>> index.insert(1, 5, 0)
>>> index.insert(6, 7, 1)
>>> index.insert(8, 11, 2)
>>> [index.key_at(i) for i in range(12)]
[None, 0, 0, 0, 0, None, 1, None, 2, 2, 2, None]
"""

from typing import Iterator
from typing import List
from typing import Optional
from typing import Set

from sortedcontainers import SortedDict

from .base import Address
from .base import IndexEntry
from .base import Key


class RangeIndex:
    r"""Range index.

    Attributes:
        _map (:obj:`SortedDict`):
            Maps each range start to its ``(endex, key)`` couple.
    """

    def __init__(
        self,
    ):

        self._map: SortedDict = SortedDict()  # SortedDict[Address, Tuple[Address, Key]]

    def __bool__(
        self,
    ) -> bool:

        return bool(self._map)

    def __iter__(
        self,
    ) -> Iterator[IndexEntry]:
        r"""Iterates over entries.

        Yields:
            tuple: ``(start, endex, key)``, ascending by address.
        """

        for start, (endex, key) in self._map.items():
            yield start, endex, key

    def __len__(
        self,
    ) -> int:

        return len(self._map)

    def __repr__(
        self,
    ) -> str:

        return f'<{type(self).__name__}{list(self)!r}>'

    def at(
        self,
        address: Address,
    ) -> Optional[IndexEntry]:
        r"""Entry covering an address.

        Arguments:
            address (int):
                Address of the target item.

        Returns:
            tuple: ``(start, endex, key)`` if covered, ``None`` otherwise.
        """

        map_ = self._map
        index = map_.bisect_right(address) - 1
        if index >= 0:
            start, (endex, key) = map_.peekitem(index)
            if address < endex:
                return start, endex, key
        return None

    def key_at(
        self,
        address: Address,
    ) -> Optional[Key]:

        entry = self.at(address)
        return None if entry is None else entry[2]

    def previous(
        self,
        address: Address,
    ) -> Optional[IndexEntry]:
        r"""Last entry ending at or before an address."""

        map_ = self._map
        index = map_.bisect_right(address) - 1
        if index >= 0:
            start, (endex, key) = map_.peekitem(index)
            if endex <= address:
                return start, endex, key
            index -= 1
            if index >= 0:
                start, (endex, key) = map_.peekitem(index)
                return start, endex, key
        return None

    def following(
        self,
        address: Address,
    ) -> Optional[IndexEntry]:
        r"""First entry starting after an address."""

        map_ = self._map
        index = map_.bisect_right(address)
        if index < len(map_):
            start, (endex, key) = map_.peekitem(index)
            return start, endex, key
        return None

    def overlaps(
        self,
        start: Address,
        endex: Address,
    ) -> bool:
        r"""Checks if any entry intersects an address range.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Returns:
            bool: Some entry intersects the range; ``False`` for empty ranges.
        """

        if endex <= start:
            return False

        map_ = self._map
        index = map_.bisect_left(endex) - 1  # last entry starting before endex
        if index < 0:
            return False

        _, (entry_endex, _) = map_.peekitem(index)
        return start < entry_endex

    def intersecting(
        self,
        start: Address,
        endex: Address,
    ) -> List[IndexEntry]:
        r"""Entries intersecting an address range.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Returns:
            list of tuples: ``(start, endex, key)``, ascending by address.
        """

        entries = []
        if start < endex:
            map_ = self._map
            index = map_.bisect_left(start) - 1  # entry starting before start
            if index >= 0:
                entry_start, (entry_endex, key) = map_.peekitem(index)
                if start < entry_endex:
                    entries.append((entry_start, entry_endex, key))

            for entry_start in map_.irange(start, endex, inclusive=(True, False)):
                entry_endex, key = map_[entry_start]
                entries.append((entry_start, entry_endex, key))
        return entries

    def keys(
        self,
    ) -> Set[Key]:
        r"""Set of the keys in use."""

        return {key for _, key in self._map.values()}

    def insert(
        self,
        start: Address,
        endex: Address,
        key: Key,
    ) -> None:
        r"""Associates a range to a key.

        Any entries overlapping the range are truncated or removed, as per
        :meth:`remove`.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

            key (int):
                Storage key.

        Raises:
            :obj:`ValueError`: Empty range.

        Examples:
            +---+---+---+---+---+---+---+---+---+
            | 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
            +===+===+===+===+===+===+===+===+===+
            |[0 | 0 | 0 | 0 | 0 | 0 | 0]|   |   |
            +---+---+---+---+---+---+---+---+---+
            |[0 | 0]|[1 | 1]|[0 | 0 | 0]|   |   |
            +---+---+---+---+---+---+---+---+---+

            >>> index = RangeIndex()
            >>> index.insert(0, 7, 0)
            >>> index.insert(2, 4, 1)
            >>> list(index)
            [(0, 2, 0), (2, 4, 1), (4, 7, 0)]
        """

        if endex <= start:
            raise ValueError('invalid range')

        self.remove(start, endex)
        self._map[start] = (endex, key)

    def remove(
        self,
        start: Address,
        endex: Address,
    ) -> None:
        r"""Clears an address range.

        Entries partially overlapping the range are truncated; an entry
        strictly containing the range is split into two entries sharing the
        same key; entries within the range are removed.

        Arguments:
            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

        Examples:
            >>> index = RangeIndex()
            >>> index.insert(0, 3, 0)
            >>> index.insert(5, 6, 1)
            >>> index.insert(7, 9, 2)
            >>> index.remove(2, 8)
            >>> list(index)
            [(0, 2, 0), (8, 9, 2)]
        """

        map_ = self._map
        for entry_start, entry_endex, key in self.intersecting(start, endex):
            del map_[entry_start]

            if entry_start < start:
                map_[entry_start] = (start, key)

            if endex < entry_endex:
                map_[endex] = (entry_endex, key)

    def discard(
        self,
        start: Address,
    ) -> None:
        r"""Removes the entry starting at an address, if any."""

        self._map.pop(start, None)
