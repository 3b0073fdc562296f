"""
FASTA length index (.fai) parsing.
"""

import logging
from pathlib import Path
from typing import Dict, Union

from ..exceptions import IndexLoadError

logger = logging.getLogger(__name__)


def length_index_path(fasta_path: Union[str, Path]) -> Path:
    """Return the companion .fai path for a FASTA file."""
    fasta_path = Path(fasta_path)
    return fasta_path.with_name(fasta_path.name + '.fai')


def load_length_index(fasta_path: Union[str, Path]) -> Dict[str, int]:
    """
    Load sequence lengths from the FASTA's .fai index.

    Each non-blank line holds whitespace-separated fields; field 0 is the
    sequence name and field 1 its length. Further fields are ignored.

    Args:
        fasta_path: Path to the FASTA file (not the .fai itself)

    Returns:
        Dict mapping sequence name -> length

    Raises:
        IndexLoadError: if the index is missing, unreadable or malformed.
            Nothing is returned on failure.
    """
    fai_path = length_index_path(fasta_path)

    try:
        with open(fai_path) as f:
            lines = f.readlines()
    except OSError as e:
        raise IndexLoadError(f"Cannot read length index {fai_path}: {e}") from e

    lengths = {}
    for line_no, line in enumerate(lines, start=1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) < 2:
            raise IndexLoadError(f"{fai_path}:{line_no}: expected name and length fields")

        name, length_field = fields[0], fields[1]
        try:
            length = int(length_field)
        except ValueError:
            raise IndexLoadError(
                f"{fai_path}:{line_no}: non-numeric length '{length_field}' for {name}"
            ) from None
        if length < 0:
            raise IndexLoadError(f"{fai_path}:{line_no}: negative length for {name}")
        if name in lengths:
            raise IndexLoadError(f"{fai_path}:{line_no}: duplicate sequence name {name}")

        lengths[name] = length

    logger.info(f"Loaded lengths for {len(lengths)} sequences from {fai_path}")
    return lengths
