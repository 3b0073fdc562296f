"""
Output generation for guide-search results.

Matches are streamed as TSV rows. The column set depends on the search
mode; see header_columns().
"""

import logging
import threading
from pathlib import Path
from typing import IO, Iterable, List

import pandas as pd

from ..core.models import MatchRecord

logger = logging.getLogger(__name__)

LEGACY_COLUMNS = ['seq_name', 'start', 'end', 'sequence', 'mismatches']
STRAND_COLUMNS = ['seq_name', 'strand', 'start', 'end', 'sequence', 'mismatches']
PAM_MISMATCH_COLUMN = 'mismatches_excl_pam'


def is_strand_aware(pam: bool, both_strands: bool) -> bool:
    """Only forward-only, non-PAM searches use the legacy column set."""
    return pam or both_strands


def header_columns(pam: bool, both_strands: bool) -> List[str]:
    """
    Column names for a report.

    - legacy (forward strand only, no PAM): seq_name start end sequence mismatches
    - strand-aware: adds a strand column after seq_name
    - PAM mode: strand-aware, mismatch column relabeled to mismatches_excl_pam
    """
    if not is_strand_aware(pam, both_strands):
        return list(LEGACY_COLUMNS)

    columns = list(STRAND_COLUMNS)
    if pam:
        columns[-1] = PAM_MISMATCH_COLUMN
    return columns


def format_row(record: MatchRecord, strand_aware: bool = True) -> str:
    """Format one MatchRecord as a newline-terminated TSV row."""
    if strand_aware:
        fields = [record.seq_name, record.strand.value, record.start, record.end,
                  record.sequence, record.mismatches]
    else:
        fields = [record.seq_name, record.start, record.end,
                  record.sequence, record.mismatches]
    return '\t'.join(str(f) for f in fields) + '\n'


class MatchWriter:
    """
    Serialized TSV sink.

    The header is written once, before any row. Each row is written as a
    single string under a lock so concurrent writers never interleave bytes
    within a row.
    """

    def __init__(self, stream: IO[str], pam: bool = False, both_strands: bool = True):
        self.stream = stream
        self.columns = header_columns(pam, both_strands)
        self.strand_aware = is_strand_aware(pam, both_strands)
        self.rows_written = 0
        self._header_written = False
        self._lock = threading.Lock()

    def write_header(self):
        """Write the header row (no-op if already written)."""
        with self._lock:
            if self._header_written:
                return
            self.stream.write('\t'.join(self.columns) + '\n')
            self._header_written = True

    def write_record(self, record: MatchRecord):
        """Write one data row atomically with respect to other writers."""
        row = format_row(record, self.strand_aware)
        with self._lock:
            if not self._header_written:
                self.stream.write('\t'.join(self.columns) + '\n')
                self._header_written = True
            self.stream.write(row)
            self.rows_written += 1

    def write_records(self, records: Iterable[MatchRecord]) -> int:
        """Write every record; returns the number written."""
        count = 0
        for record in records:
            self.write_record(record)
            count += 1
        return count

    def flush(self):
        with self._lock:
            self.stream.flush()


def summarize_matches(report_path: Path) -> pd.DataFrame:
    """
    Count hits per sequence, strand and mismatch value in a report.

    Args:
        report_path: TSV written by `guide-search search`

    Returns:
        DataFrame with one row per (seq_name, strand) and one column per
        mismatch value, plus a 'total' column. Legacy reports (no strand
        column) are treated as forward strand.
    """
    df = pd.read_csv(report_path, sep='\t', dtype={'seq_name': str})

    if 'strand' not in df.columns:
        df['strand'] = '+'

    mismatch_col = PAM_MISMATCH_COLUMN if PAM_MISMATCH_COLUMN in df.columns else 'mismatches'
    if df.empty:
        return pd.DataFrame(columns=['seq_name', 'strand', 'total'])

    summary = (
        df.groupby(['seq_name', 'strand', mismatch_col])
        .size()
        .unstack(fill_value=0)
    )
    summary.columns = [f"mm{c}" for c in summary.columns]
    summary['total'] = summary.sum(axis=1)
    summary = summary.reset_index()

    logger.info(f"Summarized {len(df)} matches across {summary['seq_name'].nunique()} sequences")
    return summary
