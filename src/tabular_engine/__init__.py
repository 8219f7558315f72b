"""
Tabular Engine - out-of-core delimited-record processing

Operators over delimited files larger than memory: random-access indexing,
duplicate elimination, sortedness checks, transpose, range slicing, and a
parallel block codec, all preserving record order and exact field bytes.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
