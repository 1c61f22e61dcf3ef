import numpy as np
import pandas as pd
import pytest

from strandspec.tl import strand_bias_test
from strandspec.utils import get_category_order


def snv_matrix(values, include_unknown=False, mode="transcription"):
    categories = get_category_order("snv", mode, include_unknown)
    mat = pd.DataFrame(0, index=categories, columns=["s1", "s2"], dtype=np.int64)
    for (category, sample), count in values.items():
        mat.loc[category, sample] = count
    return mat


class TestStrandBiasTest:
    def test_significant_asymmetry(self):
        mat = snv_matrix({
            ("ACA>AAA_transcribed", "s1"): 20,
            ("ACA>AAA_untranscribed", "s1"): 2,
            ("TCT>TTT_transcribed", "s2"): 3,
            ("TCT>TTT_untranscribed", "s2"): 3,
        })
        bias = strand_bias_test(mat)
        assert len(bias) == 12
        assert list(bias.columns) == [
            "sample", "group", "transcribed", "untranscribed", "total", "ratio", "p_value", "fdr", "significance"
        ]

        ca = bias[(bias["sample"] == "s1") & (bias["group"] == "C>A")].iloc[0]
        assert ca["transcribed"] == 20
        assert ca["untranscribed"] == 2
        assert ca["ratio"] == pytest.approx(10.0)
        assert ca["p_value"] == pytest.approx(508 / 2 ** 22)
        assert ca["fdr"] < 0.05
        assert ca["significance"] != ""

        ct = bias[(bias["sample"] == "s2") & (bias["group"] == "C>T")].iloc[0]
        assert ct["ratio"] == pytest.approx(1.0)
        assert ct["p_value"] == pytest.approx(1.0)
        assert ct["significance"] == ""

    def test_empty_groups(self):
        bias = strand_bias_test(snv_matrix({}))
        assert (bias["p_value"] == 1.0).all()
        assert bias["ratio"].isna().all()

    def test_unknown_rows_ignored(self):
        mat = snv_matrix({("ACA>AAA_unknown", "s1"): 50}, include_unknown=True)
        bias = strand_bias_test(mat)
        assert bias["total"].sum() == 0

    def test_replication_mode_from_labels(self):
        mat = snv_matrix({("ACA>AAA_left", "s1"): 4}, mode="replication")
        bias = strand_bias_test(mat)
        assert "left" in bias.columns and "right" in bias.columns
        row = bias[(bias["sample"] == "s1") & (bias["group"] == "C>A")].iloc[0]
        assert row["ratio"] == np.inf

    def test_dbs_and_indel_groups(self):
        dbs = pd.DataFrame(
            {"s": [1, 0]}, index=["CC>TT_transcribed", "CC>AA_untranscribed"]
        )
        assert list(strand_bias_test(dbs)["group"]) == ["CC"]

        indels = pd.DataFrame(
            {"s": [1, 2, 3]}, index=["DEL_C_1_0_left", "DEL_C_1_5+_right", "DEL_MH_5+_5+_left"]
        )
        bias = strand_bias_test(indels, mode="replication")
        assert list(bias["group"]) == ["DEL_C_1", "DEL_MH_5+"]
        assert bias.loc[0, "left"] == 1
        assert bias.loc[0, "right"] == 2

    def test_invalid_p(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            strand_bias_test(snv_matrix({}), p=1.5)
