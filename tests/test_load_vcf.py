import anndata as ad
import numpy as np
import pandas as pd
import pytest
from scipy.sparse import csr_matrix

from strandspec.pp import load_vcf, load_vcfs, samples_from_anndata

SITES_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##contig=<ID=chr1,length=24>\n"
    "##FILTER=<ID=PASS,Description=\"All filters passed\">\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
)


class TestLoadVcf:
    def test_per_sample_tables(self, multisample_vcf):
        samples = load_vcf(multisample_vcf, show_progress=False)
        assert list(samples) == ["s1", "s2"]
        s1 = samples["s1"]
        assert list(s1.columns) == ["chrom", "pos", "ref", "alt"]
        assert list(s1["pos"]) == [3, 5, 10, 13, 13]
        assert list(s1["alt"]) == ["A", "T", "C", "G", "T"]
        assert list(samples["s2"]["pos"]) == [5, 10]
        assert s1["pos"].dtype == np.int64

    def test_pass_only(self, multisample_vcf):
        samples = load_vcf(multisample_vcf, pass_only=True, show_progress=False)
        assert list(samples["s1"]["pos"]) == [3, 5, 13, 13]
        assert list(samples["s2"]["pos"]) == [5]

    def test_genotype_and_sample_selection(self, multisample_vcf):
        samples = load_vcf(multisample_vcf, samples=["s2", "s1"], genotypes=[3], show_progress=False)
        assert list(samples) == ["s2", "s1"]
        assert list(samples["s1"]["pos"]) == [5]
        assert len(samples["s2"]) == 0
        assert list(samples["s2"].columns) == ["chrom", "pos", "ref", "alt"]

    def test_unknown_sample(self, multisample_vcf):
        with pytest.raises(ValueError, match="not found"):
            load_vcf(multisample_vcf, samples=["s9"], show_progress=False)

    def test_sites_only_vcf(self, sites_only_vcfs):
        samples = load_vcf(sites_only_vcfs[0], show_progress=False)
        assert list(samples) == ["tumour_a"]
        assert list(samples["tumour_a"]["ref"]) == ["C", "CC"]


class TestLoadVcfs:
    def test_one_sample_per_file(self, sites_only_vcfs):
        samples = load_vcfs(sites_only_vcfs, show_progress=False)
        assert list(samples) == ["tumour_a", "tumour_b"]
        assert len(samples["tumour_a"]) == 2
        assert len(samples["tumour_b"]) == 1

    def test_names_and_filters(self, sites_only_vcfs):
        samples = load_vcfs(sites_only_vcfs, sample_names=["a", "b"], pass_only=True, show_progress=False)
        assert list(samples) == ["a", "b"]
        assert len(samples["b"]) == 0

    def test_name_count_mismatch(self, sites_only_vcfs):
        with pytest.raises(ValueError, match="sample names"):
            load_vcfs(sites_only_vcfs, sample_names=["a"], show_progress=False)

    def test_duplicates_warn_and_collapse(self, tmp_path):
        path = tmp_path / "dup.vcf"
        record = "chr1\t3\t.\tC\tA\t50\tPASS\t.\n"
        path.write_text(SITES_HEADER + record + record)
        with pytest.warns(UserWarning, match="1 duplicate"):
            samples = load_vcfs([str(path)], show_progress=False)
        assert len(samples["dup"]) == 1

    def test_progress_summary(self, sites_only_vcfs, capsys):
        load_vcfs(sites_only_vcfs)
        assert "Done! Loaded 3 mutations across 2 samples" in capsys.readouterr().out


class TestSamplesFromAnndata:
    @pytest.fixture
    def adata(self):
        X = np.array([[1, 0, 3], [0, 2, 1]])
        return ad.AnnData(
            X=X,
            obs=pd.DataFrame(index=["c1", "c2"]),
            var=pd.DataFrame(index=["chr1-3-C>A", "chr1-5-G>T", "not_a_variant"]),
        )

    def test_presence(self, adata):
        samples = samples_from_anndata(adata)
        assert list(samples) == ["c1", "c2"]
        assert samples["c1"].values.tolist() == [["chr1", 3, "C", "A"]]
        assert samples["c2"].values.tolist() == [["chr1", 5, "G", "T"]]

    def test_genotype_codes_and_sparse(self, adata):
        adata.X = csr_matrix(adata.X)
        samples = samples_from_anndata(adata, genotypes=[1, 3])
        assert len(samples["c1"]) == 1
        assert len(samples["c2"]) == 0

    def test_layer(self, adata):
        adata.layers["calls"] = np.ones(adata.shape, dtype=int)
        samples = samples_from_anndata(adata, layer="calls")
        assert len(samples["c2"]) == 2
