"""
Sequence Module - Black Box Interface

Purpose: Hand out unique sequence numbers for identifiers
Interface: next()
Hidden: Counter storage

Can be replaced with any distributed ID generator.
"""

from .sequence import LocalSequence, RedisSequence, SequenceSource

__all__ = ["LocalSequence", "RedisSequence", "SequenceSource"]
