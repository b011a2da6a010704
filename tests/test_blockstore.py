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

import pytest

from rangesparse.blockstore import BlockStore


def create_template_store() -> BlockStore:
    store = BlockStore()
    store.insert(0, 2, 5, bytearray(b'234'))
    store.insert(1, 8, 11, bytearray(b'89A'))
    store.insert(3, 12, 13, bytearray(b'C'))
    return store


class TestBlockStore:

    def test___init__(self):
        store = BlockStore()
        assert len(store) == 0
        assert list(store) == []
        assert store.get(0) is None

    def test_insert(self):
        store = BlockStore()
        data = bytearray(b'xyz')
        block = store.insert(7, 10, 13, data)
        assert block == [10, 13, b'xyz']
        assert store[7] is block
        assert block[2] is data
        assert 7 in store
        assert 8 not in store

    def test_insert_replace(self):
        store = create_template_store()
        store.insert(1, 20, 21, bytearray(b'!'))
        assert store[1] == [20, 21, b'!']
        assert len(store) == 3

    def test_remove(self):
        store = create_template_store()
        block = store.remove(1)
        assert block == [8, 11, b'89A']
        assert list(store) == [0, 3]
        with pytest.raises(KeyError):
            store.remove(1)

    def test_resize(self):
        store = create_template_store()
        store.resize(1, 9, 11)
        assert store[1] == [9, 11, b'9A']
        store.resize(1, 9, 10)
        assert store[1] == [9, 10, b'9']

    def test_resize_same(self):
        store = create_template_store()
        data = store[0][2]
        store.resize(0, 2, 5)
        assert store[0][2] is data

    def test_resize_rebinds(self):
        store = create_template_store()
        data = store[0][2]
        view = memoryview(data)
        store.resize(0, 3, 4)
        assert store[0] == [3, 4, b'3']
        assert store[0][2] is not data
        assert view == b'234'

    def test_resize_invalid(self):
        store = create_template_store()
        match = 'invalid block range'
        with pytest.raises(ValueError, match=match):
            store.resize(0, 1, 4)
        with pytest.raises(ValueError, match=match):
            store.resize(0, 3, 6)
        with pytest.raises(ValueError, match=match):
            store.resize(0, 3, 3)

    def test_retain(self):
        store = create_template_store()
        removed = store.retain(lambda key: key != 1)
        assert removed == 1
        assert list(store) == [0, 3]
        assert store.retain(lambda key: True) == 0
        assert store.retain(lambda key: False) == 2
        assert len(store) == 0

    def test_items(self):
        store = create_template_store()
        assert [key for key, _ in store.items()] == [0, 1, 3]
        assert [block[0] for _, block in store.items()] == [2, 8, 12]
