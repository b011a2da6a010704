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

r"""Keyed storage of block buffers.

A `block` is a list ``[start, endex, data]`` where `data` holds exactly
``endex - start`` items, the first one being at address `start`.
Lists are used instead of tuples so that blocks can be updated in-place.
"""

from typing import Callable
from typing import Dict
from typing import ItemsView
from typing import Iterator
from typing import Optional

from .base import Address
from .base import Block
from .base import Key


class BlockStore:
    r"""Block store.

    Attributes:
        _blocks (dict):
            Maps each storage key to its block.
    """

    def __init__(
        self,
    ):

        self._blocks: Dict[Key, Block] = {}

    def __contains__(
        self,
        key: Key,
    ) -> bool:

        return key in self._blocks

    def __getitem__(
        self,
        key: Key,
    ) -> Block:

        return self._blocks[key]

    def __iter__(
        self,
    ) -> Iterator[Key]:

        yield from self._blocks

    def __len__(
        self,
    ) -> int:

        return len(self._blocks)

    def get(
        self,
        key: Key,
    ) -> Optional[Block]:

        return self._blocks.get(key)

    def items(
        self,
    ) -> ItemsView:

        return self._blocks.items()

    def insert(
        self,
        key: Key,
        start: Address,
        endex: Address,
        data,
    ) -> Block:
        r"""Stores a block.

        Arguments:
            key (int):
                Storage key; any block already stored there is replaced.

            start (int):
                Inclusive start address.

            endex (int):
                Exclusive end address.

            data (buffer):
                Block items, owned by the store from now on.

        Returns:
            list: The stored block.
        """

        block = [start, endex, data]
        self._blocks[key] = block
        return block

    def remove(
        self,
        key: Key,
    ) -> Block:

        return self._blocks.pop(key)

    def resize(
        self,
        key: Key,
        start: Address,
        endex: Address,
    ) -> None:
        r"""Shrinks a block to a sub-range.

        Items outside the new range are dropped; surviving items keep their
        addresses. The buffer is rebound to a fresh slice, so that any views
        over the previous buffer never prevent the operation.

        Arguments:
            key (int):
                Storage key.

            start (int):
                New inclusive start address.

            endex (int):
                New exclusive end address.

        Raises:
            :obj:`ValueError`: Range not within the current block range.
        """

        block = self._blocks[key]
        block_start, block_endex, block_data = block

        if start < block_start or block_endex < endex or endex <= start:
            raise ValueError('invalid block range')

        if start != block_start or endex != block_endex:
            block[2] = block_data[(start - block_start):(endex - block_start)]
            block[0] = start
            block[1] = endex

    def retain(
        self,
        predicate: Callable[[Key], bool],
    ) -> int:
        r"""Keeps only the blocks whose key satisfies a predicate.

        Arguments:
            predicate (callable):
                Called with each storage key.

        Returns:
            int: Number of removed blocks.
        """

        blocks = self._blocks
        garbage = [key for key in blocks if not predicate(key)]
        for key in garbage:
            del blocks[key]
        return len(garbage)
