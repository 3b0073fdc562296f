"""Tests for guide_search.io modules."""

import io
import threading

import pytest
from guide_search.core.models import MatchRecord, Strand
from guide_search.exceptions import IndexLoadError, ReaderError
from guide_search.io.length_index import length_index_path, load_length_index
from guide_search.io.output import (
    MatchWriter,
    format_row,
    header_columns,
    summarize_matches,
)
from guide_search.io.reader import FastaSequenceReader

from conftest import TEST_SEQUENCES


def write_fai(tmp_path, text):
    fasta = tmp_path / "ref.fa"
    (tmp_path / "ref.fa.fai").write_text(text)
    return fasta


class TestLengthIndex:
    """Test .fai loading."""

    def test_index_path(self, tmp_path):
        """Test the companion path appends .fai."""
        assert length_index_path(tmp_path / "ref.fa.gz") == tmp_path / "ref.fa.gz.fai"

    def test_load_basic(self, tmp_path):
        """Test names and lengths are read; extra columns ignored."""
        fasta = write_fai(tmp_path, "chr1\t248956422\t112\t70\t71\nchr2\t100\t5\t100\t101\n")
        assert load_length_index(fasta) == {"chr1": 248956422, "chr2": 100}

    def test_two_field_lines(self, tmp_path):
        """Test name and length alone are sufficient."""
        fasta = write_fai(tmp_path, "a 10\nb 20\n")
        assert load_length_index(fasta) == {"a": 10, "b": 20}

    def test_blank_lines_skipped(self, tmp_path):
        """Test blank lines do not break loading."""
        fasta = write_fai(tmp_path, "a\t10\n\nb\t20\n")
        assert load_length_index(fasta) == {"a": 10, "b": 20}

    def test_missing_index(self, tmp_path):
        """Test a missing .fai raises IndexLoadError."""
        with pytest.raises(IndexLoadError, match="Cannot read"):
            load_length_index(tmp_path / "absent.fa")

    def test_missing_length_field(self, tmp_path):
        """Test a line without a length raises IndexLoadError."""
        fasta = write_fai(tmp_path, "a\t10\nb\n")
        with pytest.raises(IndexLoadError, match=":2:"):
            load_length_index(fasta)

    def test_non_numeric_length(self, tmp_path):
        """Test a non-numeric length raises IndexLoadError."""
        fasta = write_fai(tmp_path, "a\tten\n")
        with pytest.raises(IndexLoadError, match="non-numeric"):
            load_length_index(fasta)

    def test_duplicate_name(self, tmp_path):
        """Test duplicate names raise IndexLoadError."""
        fasta = write_fai(tmp_path, "a\t10\na\t20\n")
        with pytest.raises(IndexLoadError, match="duplicate"):
            load_length_index(fasta)

    def test_generated_index(self, fasta_path):
        """Test an index written by samtools faidx loads."""
        lengths = load_length_index(fasta_path)
        assert lengths == {name: len(seq) for name, seq in TEST_SEQUENCES.items()}


class TestFastaSequenceReader:
    """Test pysam-backed reader."""

    def test_count_and_names(self, fasta_path):
        """Test sequences are enumerated in file order."""
        with FastaSequenceReader(fasta_path) as reader:
            assert reader.sequence_count() == len(TEST_SEQUENCES)
            names = [reader.sequence_name(i) for i in range(reader.sequence_count())]
        assert names == list(TEST_SEQUENCES)

    def test_name_out_of_range(self, fasta_path):
        """Test out-of-range indices raise IndexError."""
        with FastaSequenceReader(fasta_path) as reader:
            with pytest.raises(IndexError):
                reader.sequence_name(len(TEST_SEQUENCES))
            with pytest.raises(IndexError):
                reader.sequence_name(-1)

    def test_fetch_full_sequence(self, fasta_path):
        """Test a full sequence is returned."""
        name = "HG002#1#chr1"
        with FastaSequenceReader(fasta_path) as reader:
            seq = reader.fetch_full_sequence(name, len(TEST_SEQUENCES[name]))
        assert seq == TEST_SEQUENCES[name]

    def test_fetch_declared_length_too_long(self, fasta_path):
        """Test a declared length larger than the sequence raises ReaderError."""
        name = "HG002#1#chrM"
        with FastaSequenceReader(fasta_path) as reader:
            with pytest.raises(ReaderError, match="declares"):
                reader.fetch_full_sequence(name, 100)

    def test_fetch_unknown_sequence(self, fasta_path):
        """Test fetching an unknown name raises ReaderError."""
        with FastaSequenceReader(fasta_path) as reader:
            with pytest.raises(ReaderError):
                reader.fetch_full_sequence("nope", 10)

    def test_open_missing_file(self, tmp_path):
        """Test opening a missing FASTA raises ReaderError."""
        with pytest.raises(ReaderError):
            FastaSequenceReader(tmp_path / "missing.fa")


class TestOutput:
    """Test TSV formatting and the writer."""

    def test_header_columns(self):
        """Test column sets per mode."""
        assert header_columns(pam=False, both_strands=False) == [
            'seq_name', 'start', 'end', 'sequence', 'mismatches']
        assert header_columns(pam=False, both_strands=True) == [
            'seq_name', 'strand', 'start', 'end', 'sequence', 'mismatches']
        assert header_columns(pam=True, both_strands=True) == [
            'seq_name', 'strand', 'start', 'end', 'sequence', 'mismatches_excl_pam']

    def test_format_row(self):
        """Test row layout with and without strand."""
        record = MatchRecord("chr1", Strand.REVERSE, 12, 17, "ACGTA", 2)
        assert format_row(record) == "chr1\t-\t12\t17\tACGTA\t2\n"
        assert format_row(record, strand_aware=False) == "chr1\t12\t17\tACGTA\t2\n"

    def test_header_written_once(self):
        """Test the header precedes rows and appears once."""
        stream = io.StringIO()
        writer = MatchWriter(stream, pam=False, both_strands=True)
        writer.write_header()
        writer.write_header()
        writer.write_record(MatchRecord("a", Strand.FORWARD, 0, 4, "ACGT", 0))
        lines = stream.getvalue().splitlines()
        assert lines == [
            "seq_name\tstrand\tstart\tend\tsequence\tmismatches",
            "a\t+\t0\t4\tACGT\t0",
        ]
        assert writer.rows_written == 1

    def test_header_before_first_record(self):
        """Test writing a record first still emits the header first."""
        stream = io.StringIO()
        writer = MatchWriter(stream, pam=False, both_strands=False)
        writer.write_records([MatchRecord("a", Strand.FORWARD, 0, 4, "ACGT", 0)])
        writer.write_header()
        assert stream.getvalue() == "seq_name\tstart\tend\tsequence\tmismatches\na\t0\t4\tACGT\t0\n"

    def test_concurrent_writers_keep_rows_intact(self):
        """Test rows from many threads never interleave within a line."""
        stream = io.StringIO()
        writer = MatchWriter(stream, pam=False, both_strands=True)
        writer.write_header()
        n_threads, n_rows = 8, 500

        def write_rows(thread_id):
            for i in range(n_rows):
                writer.write_record(MatchRecord(
                    f"seq{thread_id}", Strand.FORWARD, i, i + 20, "A" * 20, thread_id % 4
                ))

        threads = [threading.Thread(target=write_rows, args=(t,)) for t in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = stream.getvalue().splitlines()
        assert len(lines) == n_threads * n_rows + 1
        assert writer.rows_written == n_threads * n_rows
        for line in lines[1:]:
            name, strand, start, end, seq, mm = line.split("\t")
            assert strand == "+"
            assert int(end) - int(start) == 20
            assert seq == "A" * 20
            assert int(mm) == int(name[3:]) % 4
        for t in range(n_threads):
            starts = [int(l.split("\t")[2]) for l in lines[1:] if l.startswith(f"seq{t}\t")]
            assert starts == list(range(n_rows))


class TestSummarize:
    """Test report summaries."""

    def test_summarize_strand_report(self, tmp_path):
        """Test counts per sequence, strand and mismatch value."""
        report = tmp_path / "hits.tsv"
        report.write_text(
            "seq_name\tstrand\tstart\tend\tsequence\tmismatches\n"
            "chr1\t+\t0\t4\tACGT\t0\n"
            "chr1\t+\t5\t9\tACGA\t1\n"
            "chr1\t-\t2\t6\tTCGT\t1\n"
            "chr2\t+\t0\t4\tACGT\t0\n"
        )
        summary = summarize_matches(report).set_index(['seq_name', 'strand'])
        assert summary.loc[('chr1', '+'), 'total'] == 2
        assert summary.loc[('chr1', '+'), 'mm1'] == 1
        assert summary.loc[('chr1', '-'), 'mm0'] == 0
        assert summary.loc[('chr2', '+'), 'total'] == 1

    def test_summarize_legacy_report(self, tmp_path):
        """Test legacy reports are treated as forward strand."""
        report = tmp_path / "hits.tsv"
        report.write_text(
            "seq_name\tstart\tend\tsequence\tmismatches\n"
            "chr1\t0\t4\tACGT\t0\n"
        )
        summary = summarize_matches(report)
        assert list(summary['strand']) == ['+']
        assert list(summary['total']) == [1]

    def test_summarize_empty_report(self, tmp_path):
        """Test a header-only report gives an empty summary."""
        report = tmp_path / "hits.tsv"
        report.write_text("seq_name\tstrand\tstart\tend\tsequence\tmismatches_excl_pam\n")
        assert summarize_matches(report).empty


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
