import pandas as pd
import pytest

from strandspec.pp import GenomicRanges
from strandspec.tl import (
    ReplicationStrand,
    TranscriptionStrand,
    assign_strands,
    get_strand_strategy,
    type_context,
)


@pytest.fixture
def snvs(snv_dbs_mutations, reference):
    return type_context(snv_dbs_mutations, reference, "snv")


def single_snv(pos=3, ref="C", alt="A"):
    return pd.DataFrame({"chrom": ["chr1"], "pos": [pos], "ref": [ref], "alt": [alt]})


class TestTranscriptionStrand:
    def test_known_labels(self, snvs, gene_ranges):
        strands = assign_strands(snvs, gene_ranges)
        assert list(strands) == ["untranscribed", "transcribed", "unknown", "untranscribed"]
        assert list(strands.categories) == ["transcribed", "untranscribed", "unknown"]

    def test_orientation_derived_without_context(self, snv_dbs_mutations, gene_ranges):
        snvs_only = snv_dbs_mutations.iloc[:4]
        strands = assign_strands(snvs_only, gene_ranges)
        assert list(strands) == ["untranscribed", "transcribed", "unknown", "untranscribed"]

    def test_gene_strand_flips_label(self):
        plus = GenomicRanges(["chr1"], [0], [24], ["+"])
        minus = GenomicRanges(["chr1"], [0], [24], ["-"])
        assert list(assign_strands(single_snv(), plus)) == ["untranscribed"]
        assert list(assign_strands(single_snv(), minus)) == ["transcribed"]

    def test_footprint_is_reference_span(self, gene_ranges):
        # deletion anchored in the intergenic base, deleted base inside the '-' gene
        deletion = single_snv(pos=10, ref="AG", alt="A")
        assert list(assign_strands(deletion, gene_ranges)) == ["untranscribed"]

    def test_empty_input(self, empty_mutations, gene_ranges):
        strands = assign_strands(empty_mutations, gene_ranges)
        assert len(strands) == 0
        assert list(strands.categories) == ["transcribed", "untranscribed", "unknown"]


class TestAmbiguousOverlaps:
    def test_first_range_in_input_order(self):
        ranges = GenomicRanges(["chr1", "chr1"], [0, 2], [20, 10], ["+", "-"])
        assert list(assign_strands(single_snv(), ranges)) == ["untranscribed"]

        reversed_ranges = GenomicRanges(["chr1", "chr1"], [2, 0], [10, 20], ["-", "+"])
        assert list(assign_strands(single_snv(), reversed_ranges)) == ["transcribed"]

    def test_unknown_policy(self):
        conflicting = GenomicRanges(["chr1", "chr1"], [0, 2], [20, 10], ["+", "-"])
        agreeing = GenomicRanges(["chr1", "chr1"], [0, 2], [20, 10], ["+", "+"])
        assert list(assign_strands(single_snv(), conflicting, ambiguous="unknown")) == ["unknown"]
        assert list(assign_strands(single_snv(), agreeing, ambiguous="unknown")) == ["untranscribed"]

    def test_invalid_policy(self):
        with pytest.raises(ValueError, match="Invalid ambiguous policy"):
            TranscriptionStrand(ambiguous="last")


class TestReplicationStrand:
    def test_copies_region_label(self, snvs, replication_ranges):
        strands = assign_strands(snvs, replication_ranges)
        assert list(strands) == ["left", "left", "left", "right"]
        assert list(strands.categories) == ["left", "right", "unknown"]

    def test_outside_regions(self, replication_ranges):
        df = pd.DataFrame({"chrom": ["chr2"], "pos": [3], "ref": ["A"], "alt": ["G"]})
        assert list(assign_strands(df, replication_ranges)) == ["unknown"]


class TestStrategySelection:
    def test_get_strategy(self):
        assert isinstance(get_strand_strategy("transcription"), TranscriptionStrand)
        assert isinstance(get_strand_strategy("replication", ambiguous="unknown"), ReplicationStrand)
        with pytest.raises(ValueError, match="Invalid mode"):
            get_strand_strategy("translation")

    def test_mode_mismatch(self, snvs, replication_ranges):
        with pytest.raises(ValueError, match="needs transcription ranges"):
            TranscriptionStrand().assign(snvs, replication_ranges)
        with pytest.raises(ValueError):
            assign_strands(snvs, replication_ranges, mode="transcription")


class TestRawAlleles:
    def test_lower_case_alleles(self, gene_ranges):
        upper = assign_strands(single_snv(ref="C", alt="A"), gene_ranges)
        lower = assign_strands(single_snv(ref="c", alt="a"), gene_ranges)
        assert list(upper) == list(lower) == ["untranscribed"]

    def test_replication_ignores_orientation(self, replication_ranges):
        df = pd.DataFrame({
            "chrom": ["chr1", "chr1", "chr1"],
            "pos": [3, 5, 13],
            "ref": ["C", "GTT", "A"],
            "alt": ["A", "ACC", "."],
        })
        assert list(assign_strands(df, replication_ranges)) == ["left", "left", "right"]

    def test_unorientable_is_unknown_in_transcription(self, gene_ranges):
        df = pd.DataFrame({
            "chrom": ["chr1", "chr1", "chr1"],
            "pos": [3, 5, 13],
            "ref": ["C", "GTT", "A"],
            "alt": ["A", "ACC", "."],
        })
        assert list(assign_strands(df, gene_ranges)) == ["untranscribed", "unknown", "unknown"]
