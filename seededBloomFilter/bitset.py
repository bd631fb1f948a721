#!/usr/bin/env python
"""
Fixed-size set of booleans packed 8 per byte.
Bit i lives in byte i // 8 at offset i % 8 (little endian bit order).
"""
# GPLv3

import bitarray


class IndexOutOfRange(IndexError):
    """Raised when a bit index falls outside [0, len)"""


class BitSet:
    """
    A packed bit array of fixed length.
    Only the owning filter writes to it, and only through set().
    """
    def __init__(self, length):
        """
        Initialize a zeroed bit array

        Args:
            length (int): Number of addressable bits
        """
        if length < 0:
            raise ValueError("BitSet length must be >= 0, got %d" % length)
        self.length = length
        # Always at least one byte, even for an empty set
        self.size_in_bytes = (max(length, 1) - 1) // 8 + 1

        self.bits = bitarray.bitarray(self.size_in_bytes * 8, endian="little")
        self.bits.setall(0)

    def _check(self, index):
        if not 0 <= index < self.length:
            raise IndexOutOfRange(
                "out-of-bounds bit index %d for BitSet of length %d" % (index, self.length)
            )

    def get(self, index):
        """Return True iff the bit at index is 1"""
        self._check(index)
        return bool(self.bits[index])

    def set(self, index, value):
        """Make the bit at index equal to value"""
        self._check(index)
        value = bool(value)
        if self.bits[index] != value:
            self.bits[index] = value

    __getitem__ = get
    __setitem__ = set

    def __len__(self):
        """Return the size of the bit array in bits"""
        return self.length

    def count(self):
        return self.bits.count(1)

    def setall(self, value):
        """Set all bits to the given value"""
        self.bits.setall(0)
        if value and self.length:
            self.bits[:self.length] = 1

    def tobytes(self):
        """Return a copy of the underlying bytes"""
        return self.bits.tobytes()

    def copy(self):
        other = BitSet.__new__(BitSet)
        other.length = self.length
        other.size_in_bytes = self.size_in_bytes
        other.bits = self.bits.copy()
        return other

    def __or__(self, other):
        if self.length != other.length:
            raise ValueError(
                "BitSets are not conformable: %d - %d" % (self.length, other.length)
            )
        result = self.copy()
        result.bits |= other.bits
        return result

    def __repr__(self):
        return "BitSet(length=%d, set=%d)" % (self.length, self.count())
