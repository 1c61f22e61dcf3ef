import pandas as pd
import pytest

from strandspec.pp import GenomicRanges, ReferenceGenome

# chr1 positions (1-based):
#  1 A  2 A  3 C  4 A  5 G  6 T  7 T  8 C  9 C 10 A 11 G 12 G
# 13 A 14 T 15 C 16 G 17 A 18 T 19 C 20 G 21 A 22 T 23 C 24 G
SEQUENCES = {
    "chr1": "AACAGTTCCAGGATCGATCGATCG",
    "chr2": "GCATTTGCAGTACGTACGTA",
    "chr3": "TTACGACTTT",
}


@pytest.fixture
def reference():
    return ReferenceGenome.from_sequences(SEQUENCES)


@pytest.fixture
def fasta_path(tmp_path):
    path = tmp_path / "toy.fa"
    with open(path, "w") as f:
        for chrom, seq in SEQUENCES.items():
            # lower case is upper-cased on read
            f.write(f">{chrom}\n{seq.lower()}\n")
    return str(path)


@pytest.fixture
def gene_ranges():
    """'+' gene over chr1:1-9, '-' gene over chr1:11-24; chr1:10 is intergenic."""
    return GenomicRanges(["chr1", "chr1"], [0, 10], [9, 24], ["+", "-"], mode="transcription")


@pytest.fixture
def replication_ranges():
    return GenomicRanges(["chr1", "chr1"], [0, 12], [12, 24], ["left", "right"], mode="replication")


@pytest.fixture
def snv_dbs_mutations():
    """
    Four SNVs and two doublets on chr1.

    Transcription strand with gene_ranges:
    - 3 C>A   ACA>AAA  untranscribed
    - 5 G>T   ACT>AAT  transcribed
    - 10 A>C  CTG>CGG  unknown (intergenic)
    - 13 A>G  ATC>ACC  untranscribed
    - 8 CC>TT CC>TT    untranscribed
    - 11 GG>AA CC>TT   untranscribed
    """
    return pd.DataFrame({
        "chrom": ["chr1"] * 6,
        "pos": [3, 5, 10, 13, 8, 11],
        "ref": ["C", "G", "A", "A", "CC", "GG"],
        "alt": ["A", "T", "C", "G", "TT", "AA"],
    })


@pytest.fixture
def empty_mutations():
    return pd.DataFrame(columns=["chrom", "pos", "ref", "alt"])


VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##contig=<ID=chr1,length=24>\n"
    "##FILTER=<ID=PASS,Description=\"All filters passed\">\n"
    "##FILTER=<ID=LowQual,Description=\"Low quality\">\n"
    "##FORMAT=<ID=GT,Number=1,Type=String,Description=\"Genotype\">\n"
)


@pytest.fixture
def multisample_vcf(tmp_path):
    path = tmp_path / "cohort.vcf"
    rows = [
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\ts1\ts2",
        "chr1\t3\t.\tC\tA\t50\tPASS\t.\tGT\t0/1\t0/0",
        "chr1\t5\t.\tG\tT\t50\tPASS\t.\tGT\t1/1\t0/1",
        "chr1\t10\t.\tA\tC\t50\tLowQual\t.\tGT\t0/1\t0/1",
        "chr1\t13\t.\tA\tG,T\t50\tPASS\t.\tGT\t0/1\t0/0",
    ]
    path.write_text(VCF_HEADER + "\n".join(rows) + "\n")
    return str(path)


@pytest.fixture
def sites_only_vcfs(tmp_path):
    header = VCF_HEADER + "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
    first = tmp_path / "tumour_a.vcf"
    first.write_text(header + "chr1\t3\t.\tC\tA\t50\tPASS\t.\nchr1\t8\t.\tCC\tTT\t50\tPASS\t.\n")
    second = tmp_path / "tumour_b.vcf"
    second.write_text(header + "chr1\t13\t.\tA\tG\t50\tLowQual\t.\n")
    return [str(first), str(second)]
