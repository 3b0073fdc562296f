"""
Indexed FASTA access.

FastaSequenceReader wraps pysam.FastaFile. A handle must not be shared
between workers: each parallel task opens its own reader.
"""

import logging
from pathlib import Path
from typing import Union

import pysam

from ..exceptions import ReaderError

logger = logging.getLogger(__name__)


class FastaSequenceReader:
    """Random access to the sequences of an indexed FASTA file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._fasta = pysam.FastaFile(str(self.path))
        except (OSError, ValueError) as e:
            raise ReaderError(f"Cannot open FASTA {self.path}: {e}") from e

    def sequence_count(self) -> int:
        """Number of sequences in the file."""
        return self._fasta.nreferences

    def sequence_name(self, index: int) -> str:
        """Name of the sequence at `index` (file order).

        Raises IndexError if index is out of range.
        """
        if index < 0 or index >= self._fasta.nreferences:
            raise IndexError(f"Sequence index {index} out of range (0-{self._fasta.nreferences - 1})")
        return self._fasta.references[index]

    def fetch_full_sequence(self, name: str, length: int) -> str:
        """
        Fetch the complete sequence `name`.

        Args:
            name: Sequence name
            length: Expected length from the length index

        Returns:
            Sequence string of exactly `length` characters

        Raises:
            ReaderError: if the fetch fails or returns a different length
        """
        try:
            sequence = self._fasta.fetch(reference=name, start=0, end=length)
        except (OSError, KeyError, ValueError) as e:
            raise ReaderError(f"Failed to fetch {name} from {self.path}: {e}") from e

        if len(sequence) != length:
            raise ReaderError(
                f"{name}: index declares {length} bp but {len(sequence)} bp were read"
            )
        return sequence

    def close(self):
        self._fasta.close()

    def __enter__(self) -> 'FastaSequenceReader':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
