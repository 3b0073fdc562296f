"""
I/O modules for guide-search.
"""

from .length_index import (
    length_index_path,
    load_length_index,
)
from .output import (
    MatchWriter,
    format_row,
    header_columns,
    summarize_matches,
)
from .reader import FastaSequenceReader

__all__ = [
    'length_index_path',
    'load_length_index',
    'FastaSequenceReader',
    'MatchWriter',
    'format_row',
    'header_columns',
    'summarize_matches',
]
