"""
Utility modules for guide-search.
"""

from .sequence import (
    gc_content,
    hamming_distance,
    is_guide_sequence,
    reverse_complement,
)

__all__ = [
    'reverse_complement',
    'hamming_distance',
    'is_guide_sequence',
    'gc_content',
]
