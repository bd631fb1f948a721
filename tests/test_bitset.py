import pytest

from seededBloomFilter.bitset import BitSet, IndexOutOfRange

BITSET_SIZE = 1000


def test_correctness():
    bs = BitSet(BITSET_SIZE)

    for i in range(BITSET_SIZE):
        assert not bs.get(i), "bitset index %d is not initially false" % i

        bs.set(i, True)
        assert bs.get(i), "bitset index %d is not true after set true" % i

        bs.set(i, False)
        assert not bs.get(i), "bitset index %d is not false after set false" % i

    assert not any(bs.get(i) for i in range(BITSET_SIZE))


def test_setall_false_clears_everything():
    bs = BitSet(BITSET_SIZE)
    for i in range(0, BITSET_SIZE, 3):
        bs[i] = True
    bs.setall(False)
    assert not any(bs[i] for i in range(BITSET_SIZE))
    assert bs.count() == 0


def test_setall_true_leaves_padding_alone():
    bs = BitSet(10)
    bs.setall(True)
    assert bs.count() == 10
    assert bs.tobytes() == b"\xff\x03"


def test_byte_layout():
    bs = BitSet(16)
    bs.set(0, True)
    bs.set(9, True)
    assert bs.tobytes() == bytes([0b00000001, 0b00000010])


@pytest.mark.parametrize("length, nbytes", [(0, 1), (1, 1), (8, 1), (9, 2), (150000, 18750)])
def test_allocation(length, nbytes):
    bs = BitSet(length)
    assert bs.size_in_bytes == nbytes
    assert len(bs.tobytes()) == nbytes
    assert len(bs) == length


def test_set_is_idempotent():
    bs = BitSet(8)
    bs.set(3, True)
    bs.set(3, True)
    assert bs.get(3)
    assert bs.count() == 1
    bs.set(5, False)
    assert not bs.get(5)
    assert bs.count() == 1


def test_bounds_get():
    bs = BitSet(BITSET_SIZE)
    with pytest.raises(IndexOutOfRange):
        bs.get(BITSET_SIZE)


def test_bounds_set():
    bs = BitSet(BITSET_SIZE)
    with pytest.raises(IndexOutOfRange):
        bs.set(BITSET_SIZE, True)


def test_bounds_inside_padding_byte():
    # 10 bits occupy 2 bytes, but bits 10..15 are not addressable
    bs = BitSet(10)
    with pytest.raises(IndexOutOfRange):
        bs[12]


def test_negative_index_is_out_of_range():
    bs = BitSet(BITSET_SIZE)
    with pytest.raises(IndexOutOfRange):
        bs.get(-1)


def test_empty_bitset_has_no_valid_index():
    bs = BitSet(0)
    with pytest.raises(IndexError):
        bs.get(0)


def test_negative_length():
    with pytest.raises(ValueError):
        BitSet(-1)


def test_or_and_copy():
    a = BitSet(20)
    a.set(1, True)
    b = a.copy()
    b.set(15, True)
    assert not a.get(15)

    c = a | b
    assert c.get(1) and c.get(15)
    assert c.count() == 2

    with pytest.raises(ValueError):
        a | BitSet(21)
