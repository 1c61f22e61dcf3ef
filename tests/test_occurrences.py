import numpy as np
import pandas as pd
import pytest

from strandspec.tl import strand_occurrences
from strandspec.utils import get_category_order


class TestStrandOccurrences:
    def test_counts_known_strands(self):
        row = strand_occurrences(
            ["ACA>AAA", "ACA>AAA", "TTT>TGT"],
            ["transcribed", "unknown", "untranscribed"],
        )
        assert len(row) == 192
        assert list(row.index) == get_category_order("snv", "transcription")
        assert row["ACA>AAA_transcribed"] == 1
        assert row["ACA>AAA_untranscribed"] == 0
        assert row["TTT>TGT_untranscribed"] == 1
        assert row.sum() == 2
        assert row.dtype == np.int64

    def test_include_unknown(self):
        row = strand_occurrences(
            ["ACA>AAA", "ACA>AAA"],
            pd.Categorical(["transcribed", "unknown"], categories=["transcribed", "untranscribed", "unknown"]),
            include_unknown=True,
        )
        assert len(row) == 288
        assert row["ACA>AAA_unknown"] == 1
        assert row.sum() == 2

    def test_empty_input_is_all_zero(self):
        row = strand_occurrences([], [], mutation_type="indel", mode="replication")
        assert len(row) == 166
        assert (row == 0).all()

    def test_dbs_replication(self):
        row = strand_occurrences(["CC>TT", "CC>TT", "TA>AT"], ["left", "left", "right"], "dbs", "replication")
        assert len(row) == 156
        assert row["CC>TT_left"] == 2
        assert row["TA>AT_right"] == 1

    def test_context_outside_alphabet(self):
        with pytest.raises(ValueError, match="outside the snv alphabet"):
            strand_occurrences(["CC>TT"], ["transcribed"])

    def test_strand_outside_mode(self):
        with pytest.raises(ValueError, match="Invalid strand labels"):
            strand_occurrences(["ACA>AAA"], ["left"])

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            strand_occurrences(["ACA>AAA", "ACA>AAA"], ["transcribed"])
