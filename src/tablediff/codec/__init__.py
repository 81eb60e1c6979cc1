"""
Binary wire format for diff results.
"""

from .binary import HEADER_SIZE, decode_binary, encode_binary, recompute_word_diffs

__all__ = ["HEADER_SIZE", "encode_binary", "decode_binary", "recompute_word_diffs"]
