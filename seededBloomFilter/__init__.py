from seededBloomFilter.bitset import BitSet, IndexOutOfRange
from seededBloomFilter.bloom import BloomFilter

__all__ = ["BitSet", "BloomFilter", "IndexOutOfRange"]
