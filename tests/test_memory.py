import pytest

from moonlet.memory import (
    MAX_SIZET,
    MEMERRMSG,
    MIN_SIZE_ARRAY,
    Allocator,
    LuaMemoryError,
    grow_size,
)


def test_grow_size_minimum():
    assert grow_size(0, 100, "full") == MIN_SIZE_ARRAY
    assert grow_size(1, 100, "full") == MIN_SIZE_ARRAY


def test_grow_size_doubles():
    assert grow_size(10, 100, "full") == 20


def test_grow_size_caps_at_limit():
    assert grow_size(60, 100, "full") == 100


def test_grow_size_at_limit_raises():
    with pytest.raises(OverflowError, match="too many"):
        grow_size(100, 100, "too many items")


def test_realloc_tracks_total():
    alloc = Allocator(100)
    assert alloc.realloc(0, 60) == 60
    assert alloc.total_bytes == 60
    alloc.realloc(60, 0)
    assert alloc.total_bytes == 0


def test_realloc_over_limit_raises_and_keeps_total():
    alloc = Allocator(100)
    alloc.realloc(0, 60)
    with pytest.raises(LuaMemoryError) as info:
        alloc.realloc(0, 50)
    assert str(info.value) == MEMERRMSG
    assert alloc.total_bytes == 60


def test_shrinking_never_fails():
    alloc = Allocator(100)
    alloc.realloc(0, 100)
    alloc.limit = 10
    assert alloc.realloc(100, 50) == 50


def test_unlimited_allocator():
    alloc = Allocator()
    big = 10**12
    assert alloc.realloc(0, big) == big


def test_realloc_invalid_sizes():
    alloc = Allocator()
    with pytest.raises(ValueError):
        alloc.realloc(5, 10)
    with pytest.raises(ValueError):
        alloc.realloc(0, -1)


def test_grow_accounts_difference():
    alloc = Allocator()
    size = alloc.grow(0, 1000, "full")
    assert size == MIN_SIZE_ARRAY
    assert alloc.total_bytes == size
    bigger = alloc.grow(size, 1000, "full")
    assert bigger > size
    assert alloc.total_bytes == bigger


def test_grow_failure_leaves_total():
    alloc = Allocator()
    alloc.realloc(0, 7)
    with pytest.raises(OverflowError):
        alloc.grow(7, 7, "full")
    assert alloc.total_bytes == 7


def test_check_vector():
    alloc = Allocator()
    assert alloc.check_vector(3, 8) == 24
    with pytest.raises(OverflowError, match="block too big"):
        alloc.check_vector(MAX_SIZET, 2)