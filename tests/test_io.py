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

import io
from array import array

import pytest

from rangesparse.inplace import SparseVec
from rangesparse.io import SEEK_CUR
from rangesparse.io import SEEK_DATA
from rangesparse.io import SEEK_END
from rangesparse.io import SEEK_HOLE
from rangesparse.io import SEEK_SET
from rangesparse.io import SparseIO


class TestSparseIO:

    def test___del__(self):
        stream = SparseIO(SparseVec.from_blocks([[0, b'Hello, World!']]))
        stream.__del__()
        assert stream.closed is True

    def test___enter___doctest(self):
        with SparseIO(SparseVec.from_blocks([[0, b'Hello, World!']])) as stream:
            data = stream.read()
        assert data == b'Hello, World!'

    def test___exit___doctest(self):
        with SparseIO(SparseVec.from_blocks([[0, b'Hello, World!']])) as stream:
            assert stream.closed is False
        assert stream.closed is True

    def test___init___doctest(self):
        stream = SparseIO(seek=3)
        assert stream.write(b'Hello') == 5
        assert stream.seek(10) == 10
        assert stream.write(b'World!') == 6
        assert list(stream.vec.ranges()) == [(3, 8), (10, 16)]
        assert stream.seek(3) == 3
        assert stream.read() == b'Hello'
        assert stream.read() == -2
        assert stream.read() == b'World!'
        assert stream.read() == b''

    def test___init___typecode_invalid(self):
        with pytest.raises(ValueError, match='byte vector required'):
            SparseIO(SparseVec('Q'))

    def test___iter___doctest(self):
        vec = SparseVec.from_blocks([[3, b'Hello\nWorld!'], [20, b'Bye\n']])
        with SparseIO(vec) as stream:
            lines = [line for line in stream]
        assert lines == [b'Hello\n', b'World!', b'Bye\n']

    def test___next__(self):
        vec = SparseVec.from_blocks([[3, b'Hello\nWorld!'], [20, b'Bye\n']])
        with SparseIO(vec, seek=9) as stream:
            assert next(stream) == b'World!'
            assert next(stream) == -5
            assert next(stream) == b'Bye\n'

    def test__check_closed(self):
        with SparseIO() as stream:
            stream._check_closed()
        with pytest.raises(ValueError, match='I/O operation on closed stream'):
            stream._check_closed()

    def test_close(self):
        stream = SparseIO(SparseVec.from_blocks([[0, b'ABC']]))
        assert stream.closed is False
        assert stream.vec is not None
        assert stream.readable() is True
        stream.close()
        assert stream.closed is True
        assert stream.vec is None
        with pytest.raises(ValueError, match='I/O operation on closed stream'):
            stream.readable()
        with pytest.raises(ValueError, match='I/O operation on closed stream'):
            stream.write(b'x')

    def test_unsupported(self):
        stream = SparseIO()
        with pytest.raises(io.UnsupportedOperation):
            stream.detach()
        with pytest.raises(io.UnsupportedOperation):
            stream.fileno()
        with pytest.raises(io.UnsupportedOperation):
            stream.truncate()
        assert stream.isatty() is False
        stream.flush()

    def test_read_doctest(self):
        vec = SparseVec.from_blocks([[3, b'Hello'], [10, b'World!']])
        stream = SparseIO(vec, seek=4)
        assert stream.read(1) == b'e'
        assert stream.tell() == 5
        assert stream.read(99) == b'llo'
        assert stream.tell() == 8
        assert stream.read() == -2
        assert stream.tell() == 10
        assert stream.read(None) == b'World!'
        assert stream.tell() == 16
        assert stream.read() == b''
        assert stream.tell() == 16

    def test_read_empty(self):
        stream = SparseIO()
        assert stream.read() == b''
        assert stream.tell() == 0

    def test_readinto(self):
        vec = SparseVec.from_blocks([[3, b'Hello'], [10, b'World!']])
        stream = SparseIO(vec, seek=3)
        buffer = bytearray(8)
        assert stream.readinto(buffer) == 5
        assert buffer == b'Hello\0\0\0'
        assert stream.tell() == 8
        assert stream.readinto(buffer) == 0
        assert stream.tell() == 8
        stream.seek(8, SEEK_DATA)
        assert stream.readinto(buffer) == 6
        assert buffer[:6] == b'World!'

    def test_readline_size(self):
        vec = SparseVec.from_blocks([[0, b'Hello\nWorld!\n']])
        stream = SparseIO(vec)
        assert stream.readline(3) == b'Hel'
        assert stream.readline() == b'lo\n'
        assert stream.readline(None) == b'World!\n'
        assert stream.readline() == b''

    def test_seek_doctest(self):
        vec = SparseVec.from_blocks([[3, b'Hello'], [12, b'World!']])
        stream = SparseIO(vec)
        assert stream.seek(5) == 5
        assert stream.seek(-3, SEEK_END) == 15
        assert stream.seek(2, SEEK_CUR) == 17
        assert stream.seek(1, SEEK_SET) == 1
        assert stream.seek(stream.tell(), SEEK_HOLE) == 1
        assert stream.seek(stream.tell(), SEEK_DATA) == 3
        assert stream.seek(stream.tell(), SEEK_HOLE) == 8
        assert stream.seek(stream.tell(), SEEK_DATA) == 12
        assert stream.seek(stream.tell(), SEEK_HOLE) == 18
        assert stream.seek(stream.tell(), SEEK_DATA) == 18
        assert stream.seek(22) == 22
        assert stream.seek(0) == 0

    def test_seek_end_empty(self):
        stream = SparseIO()
        assert stream.seek(0, SEEK_END) == 0
        assert stream.seek(5, SEEK_END) == 5

    def test_seek_invalid(self):
        stream = SparseIO()
        with pytest.raises(ValueError, match='invalid whence'):
            stream.seek(0, 99)

    def test_write_doctest(self):
        vec = SparseVec.from_blocks([[3, b'Hello'], [10, b'World!']])
        stream = SparseIO(vec, seek=10)
        assert stream.write(b'Human') == 5
        assert vec.to_blocks() == [[3, b'Hello'], [10, b'Human!']]
        assert stream.tell() == 15
        assert stream.writable() is True
        assert stream.seekable() is True

    def test_write_merge(self):
        stream = SparseIO()
        stream.seek(8)
        stream.write(b'World!')
        stream.seek(0)
        stream.write(b'Hello, ')
        assert stream.vec.to_blocks() == [[0, b'Hello, '], [8, b'World!']]
        stream.write(b'_')
        assert stream.vec.to_blocks() == [[0, b'Hello, _World!']]

    def test_write_wide_items(self):
        stream = SparseIO()
        size = stream.write(memoryview(array('H', [0x4142, 0x4344])))
        assert size == 4
        assert stream.tell() == 4
        assert list(stream.vec.ranges()) == [(0, 4)]
        assert stream.write(b'EF') == 2
        assert stream.tell() == 6
        assert list(stream.vec.ranges()) == [(0, 6)]
        assert stream.vec.get(0, 6).tobytes() == array('H', [0x4142, 0x4344]).tobytes() + b'EF'

    def test_write_value(self):
        stream = SparseIO()
        assert stream.write(0x41) == 1
        assert stream.tell() == 1
        assert stream.vec.to_blocks() == [[0, b'A']]
