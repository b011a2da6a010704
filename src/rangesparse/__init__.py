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

r"""Sparse range-indexed containers.

The audience of this package are those who have to collect items over a very
broad addressing space (*e.g.* the 64-bit virtual memory of a process), where
only some sparse parts are ever observed, in arbitrary order and size.

A :obj:`SparseVec` stores only the written ranges, as *blocks*:

+---+---+---+---+---+---+---+---+---+
| 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
+===+===+===+===+===+===+===+===+===+
|   |[A | B | C]|   |[x | y | z]|   |
+---+---+---+---+---+---+---+---+---+

>>> vec = SparseVec()
>>> vec.insert(b'ABC', 1)
>>> vec.insert(b'xyz', 5)
>>> list(vec.ranges())
[(1, 4), (5, 8)]

Overlapping writes follow *last-write-wins*, while the non-overlapping parts
of older writes are kept. Contiguous blocks are always merged:

+---+---+---+---+---+---+---+---+---+
| 0 | 1 | 2 | 3 | 4 | 5 | 6 | 7 | 8 |
+===+===+===+===+===+===+===+===+===+
|   |[A | B | 1 | 2 | x | y | z]|   |
+---+---+---+---+---+---+---+---+---+

>>> vec.insert(b'12', 3)
>>> list(vec.ranges())
[(1, 8)]
>>> bytes(vec.get(1, 8))
b'AB12xyz'

Reading across a never-written address fails:

>>> vec.get(7, 9) is None
True
"""

__version__ = '0.1.0'

from .base import ADDRESS_MAX  # noqa: F401
from .base import AddressOverflow  # noqa: F401
from .base import BorrowError  # noqa: F401
from .base import ImmutableSparse  # noqa: F401
from .base import InvariantError  # noqa: F401
from .base import MutableSparse  # noqa: F401
from .blockstore import BlockStore  # noqa: F401
from .inplace import SparseVec  # noqa: F401
from .inplace import collapse_blocks  # noqa: F401
from .io import SEEK_CUR  # noqa: F401
from .io import SEEK_DATA  # noqa: F401
from .io import SEEK_END  # noqa: F401
from .io import SEEK_HOLE  # noqa: F401
from .io import SEEK_SET  # noqa: F401
from .io import SparseIO  # noqa: F401
from .rangeindex import RangeIndex  # noqa: F401
