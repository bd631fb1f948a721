#!/usr/bin/env python
"""
A Bloom Filter with per-instance randomly keyed hash functions.
Calculating the expected false positive rate:
            Where:
            m is: self.bitcount (how many bits in self.bfilter)
            n is: the number of values added to self.bfilter
            k is: the number of hashes being produced
            (1 - math.exp(-float(k * n) / m)) ** k
With the defaults (m=150000, k=5) and n=10000 this is about 0.0005.
http://en.wikipedia.org/wiki/Bloom_filter
"""
# GPLv3

import sys
import os
import hashlib
import math
import numbers
from typing import Generic, TypeVar
from tqdm import tqdm
from seededBloomFilter.bitset import BitSet

T = TypeVar("T")

KEY_SIZE = 16
DIGEST_SIZE = 8


def _framed(tag, parts):
    # count, then each part length-prefixed, so nested values never run together
    out = [tag, len(parts).to_bytes(8, "little")]
    for part in parts:
        out.append(len(part).to_bytes(8, "little"))
        out.append(part)
    return b"".join(out)


def _fold_number(value):
    """Fraction, Decimal, complex -> the int or float it equals, if any."""
    if isinstance(value, complex):
        return value.real if value.imag == 0 else value
    try:
        as_int = int(value)
        if as_int == value:
            return as_int
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        as_float = float(value)
    except (TypeError, ValueError, OverflowError):
        return value
    return as_float if as_float == value else value


def encode(value):
    """
    Canonical bytes for a value's content, tagged by kind so that 1, "1"
    and b"1" hash apart. Values that compare equal encode equally:
    1 == 1.0 == Fraction(1), (a, a) == (a, b) when a == b, and frozensets
    regardless of how they were built.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return b"b" + bytes(value)
    if isinstance(value, str):
        return b"s" + value.encode("utf8")
    if isinstance(value, numbers.Number) and not isinstance(value, (int, float)):
        value = _fold_number(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return b"i" + value.to_bytes((value.bit_length() + 8) // 8, "little", signed=True)
    if isinstance(value, float):
        return b"f" + value.hex().encode("ascii")
    if isinstance(value, tuple):
        return _framed(b"t", [encode(v) for v in value])
    if isinstance(value, frozenset):
        return _framed(b"z", sorted(encode(v) for v in value))
    try:
        h = hash(value)
    except TypeError as e:
        raise TypeError("cannot hash %r into a BloomFilter: %s" % (type(value).__name__, e)) from e
    # the object's own __hash__, consistent with its __eq__ within this process
    return b"h" + h.to_bytes(8, "little", signed=True)


def keyed_blake2b(key):
    return hashlib.blake2b(digest_size=DIGEST_SIZE, key=key)


class BloomFilter(Generic[T]):
    def __init__(self, array_size=150000, hashes=5):
        """
        Initializes an empty BloomFilter() object:
        Expects:
            array_size (in bits): capacity of the filter, fixed for its lifetime
            hashes (int): number of independent hash functions
        Each hash function is BLAKE2b keyed with its own random key, so two
        filters never hash alike and their bits are not comparable.
        """
        if not isinstance(array_size, int) or array_size <= 0:
            raise ValueError("array_size must be a positive int, got %r" % (array_size,))
        if not isinstance(hashes, int) or hashes <= 0:
            raise ValueError("hashes must be a positive int, got %r" % (hashes,))

        self.bitcount = array_size
        self.slices = hashes
        self._keys = tuple(os.urandom(KEY_SIZE) for _ in range(hashes))
        self._hashers = [keyed_blake2b(key) for key in self._keys]
        self.bfilter = BitSet(array_size)
        self.hits = 0
        self.queries = 0

        sys.stderr.write(
            f"BLOOM: bits: {self.bitcount}, hashes: {self.slices}, "
            f"func: blake2b/{DIGEST_SIZE * 8}, size: {self.bfilter.size_in_bytes / 1024:.2f}KB\n"
        )

    @classmethod
    def for_capacity(cls, capacity, error_rate=0.01):
        """
        Sizes a filter for `capacity` insertions at roughly `error_rate`
        false positives.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive, got %r" % (capacity,))
        if not 0 < error_rate < 1:
            raise ValueError("error_rate must be in (0, 1), got %r" % (error_rate,))
        bitcount = int(math.ceil(-capacity * math.log(error_rate) / (math.log(2) ** 2)))
        hashes = max(1, int(round(bitcount / capacity * math.log(2))))
        return cls(array_size=bitcount, hashes=hashes)

    def __len__(self):
        return self.bitcount

    def _hash(self, value):
        """
        Yields one bit position per hash function for value.
        Positions are digest % bitcount, which slightly favours low indices
        when bitcount does not divide 2**64.
        """
        data = encode(value)
        for hasher in self._hashers:
            h = hasher.copy()
            h.update(data)
            yield int.from_bytes(h.digest(), "little") % self.bitcount

    def add(self, value):
        """
        Sets every bit value hashes to. Bits are never cleared.
        """
        self._add(self._hash(value))

    insert = add

    def _add(self, positions):
        for pos in positions:
            self.bfilter.set(pos, True)

    def query(self, value):
        """
        True iff all hashed bits are set. False is certain, True is probable.
        """
        return self._query(self._hash(value))

    contains = query

    def _query(self, positions):
        # read-only; all() stops at the first unset bit
        return all(self.bfilter.get(pos) for pos in positions)

    def __contains__(self, value):
        return self.query(value)

    def __getitem__(self, value):
        return self.query(value)

    def update(self, value):
        """
        Test-and-set: returns whether value was probably seen before, and
        leaves it present either way. Hashes once for both steps.
        Counts toward hits/queries; plain query() does not.
        """
        positions = [*(self._hash(value))]
        seen = self._query(positions)
        if seen:
            self.hits += 1
        else:
            self._add(positions)
        self.queries += 1
        return seen

    def extend(self, values, progress=False):
        """Adds every item of an iterable, optionally with a progress bar"""
        for value in tqdm(values, desc="BLOOM: adding", unit="item", disable=not progress):
            self.add(value)

    def copy(self):
        """
        Returns a filter with the same hash keys and a copy of the bits.
        """
        other = self.__class__.__new__(self.__class__)
        other.bitcount = self.bitcount
        other.slices = self.slices
        other._keys = self._keys
        other._hashers = [keyed_blake2b(key) for key in self._keys]
        other.bfilter = self.bfilter.copy()
        other.hits = 0
        other.queries = 0
        return other

    __copy__ = copy

    def union(self, other):
        """
        Merges two filters of the same lineage (see copy()) into a new one.
        """
        if not isinstance(other, BloomFilter):
            raise TypeError("can only merge with another BloomFilter, got %r" % type(other).__name__)
        if (self.bitcount, self.slices, self._keys) != (other.bitcount, other.slices, other._keys):
            raise ValueError(
                "BLOOM: filters are not conformable: only copies of the same filter can be merged"
            )
        merged = self.copy()
        merged.bfilter = self.bfilter | other.bfilter
        return merged

    def __or__(self, other):
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.union(other)

    @property
    def bits_set(self):
        return self.bfilter.count()

    @property
    def fill_ratio(self):
        return self.bits_set / self.bitcount

    def false_positive_rate(self):
        """Estimated chance that query() answers True for an unseen value"""
        return self.fill_ratio ** self.slices

    def stat(self):
        seen_ratio = self.hits / self.queries if self.queries else 0.0
        sys.stderr.write(
            f"BLOOM: load: {self.bits_set}/{self.bitcount} bits ({self.fill_ratio:.4%})\n"
            f"BLOOM: update: {self.hits} already seen of {self.queries} ({seen_ratio:.4%})\n"
        )

    def info(self):
        sys.stderr.write(
            f"BLOOM: bits: {self.bitcount}, hashes: {self.slices}, "
            f"est. false positive rate: {self.false_positive_rate():.8f}\n"
        )
        self.stat()

    def __repr__(self):
        return "BloomFilter(array_size=%d, hashes=%d, bits_set=%d)" % (
            self.bitcount, self.slices, self.bits_set
        )
