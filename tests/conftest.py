"""Shared fixtures: small indexed FASTA files."""

import pysam
import pytest

# Guide GCTGAAGCACTGCACGCCGT appears on chr1 forward (with AGG PAM) and on
# chr2 reverse; HG002 sequences test the prefix filter.
GUIDE = "GCTGAAGCACTGCACGCCGT"

TEST_SEQUENCES = {
    "HG002#1#chr1": "TTTT" + GUIDE + "AGG" + "CCCCAAAATTTT",
    "HG002#1#chr2": "ACACAC" + "CCT" + "ACGGCGTGCAGTGCTTCAGC" + "GTGTGT",
    "HG003#1#chr1": "GGGG" + GUIDE + "TGG" + "AAAA",
    "HG002#1#chrM": "ACGT",
}


def write_fasta(path, sequences, index=True):
    """Write sequences as single-line FASTA records and optionally faidx them."""
    with open(path, 'w') as f:
        for name, seq in sequences.items():
            f.write(f">{name}\n{seq}\n")
    if index:
        pysam.faidx(str(path))
    return path


@pytest.fixture
def fasta_path(tmp_path):
    """Indexed FASTA containing TEST_SEQUENCES."""
    return write_fasta(tmp_path / "pangenome.fa", TEST_SEQUENCES)


@pytest.fixture
def unindexed_fasta_path(tmp_path):
    """FASTA without a .fai."""
    return write_fasta(tmp_path / "noindex.fa", TEST_SEQUENCES, index=False)
