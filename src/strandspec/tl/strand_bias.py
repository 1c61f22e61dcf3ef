"""Test strand asymmetry in stranded count matrices."""

from typing import Optional

import numpy as np
import pandas as pd
from scipy.stats import binomtest, false_discovery_control

from ..utils.categories import STRAND_LABELS, UNKNOWN_STRAND, StrandMode, resolve_mode, split_category
from ..utils.context import substitution_type


def _context_group(context: str) -> str:
    """Collapse a context label into the group tested for bias."""
    if ">" in context and len(context) == 7:
        # SNV, e.g. 'ACA>AAA' -> 'C>A'
        return substitution_type(context)
    if ">" in context:
        # DBS, grouped by reference doublet, e.g. 'CC>TT' -> 'CC'
        return context.split(">")[0]
    # indel, e.g. 'DEL_C_1_3' -> 'DEL_C_1'
    return context.rsplit("_", 1)[0]


def _infer_mode(matrix: pd.DataFrame) -> StrandMode:
    if "mode" in matrix.attrs:
        return resolve_mode(matrix.attrs["mode"])
    strands = {split_category(c)[1] for c in matrix.index}
    for mode, labels in STRAND_LABELS.items():
        if set(labels) & strands:
            return mode
    raise ValueError("Cannot infer the strand mode from the matrix row labels")


def _significance(fdr: float) -> str:
    if fdr < 0.001:
        return "***"
    if fdr < 0.01:
        return "**"
    if fdr < 0.05:
        return "*"
    return ""


def strand_bias_test(
    matrix: pd.DataFrame,
    mode: Optional[str] = None,
    p: float = 0.5
) -> pd.DataFrame:
    """
    Two-sided binomial test for strand asymmetry per sample and mutation group.

    Counts are pooled over the contexts of each group: substitution type for
    SNVs (e.g. 'C>T'), reference doublet for DBS (e.g. 'CC'), indel class
    without its repeat/homology count for indels (e.g. 'DEL_C_1'). Rows with
    an 'unknown' strand are ignored.

    Parameters
    ----------
    matrix : pd.DataFrame
        Stranded count matrix (categories × samples) from
        tl.compute_stranded_matrices
    mode : str, optional
        'transcription' or 'replication'; read from ``matrix.attrs`` or the
        row labels when omitted
    p : float, default 0.5
        Expected fraction of mutations on the first strand

    Returns
    -------
    pd.DataFrame
        One row per (sample, group) with columns: sample, group, one count
        column per strand, total, ratio (first / second strand), p_value,
        fdr (Benjamini-Hochberg over all tests) and significance
        ('*' < 0.05, '**' < 0.01, '***' < 0.001 on fdr)

    Examples
    --------
    >>> import strandspec as ss
    >>> mat = ss.tl.compute_stranded_matrices(samples, ref, genes)
    >>> bias = ss.tl.strand_bias_test(mat)
    >>> bias[bias['fdr'] < 0.05]
    """
    if not 0 < p < 1:
        raise ValueError(f"p must be between 0 and 1, got {p}")

    mode = resolve_mode(mode) if mode is not None else _infer_mode(matrix)
    strand_1, strand_2 = STRAND_LABELS[mode]

    parts = [split_category(c) for c in matrix.index]
    strands = np.array([strand for _, strand in parts], dtype=object)
    invalid = sorted(set(strands) - {strand_1, strand_2, UNKNOWN_STRAND})
    if invalid:
        raise ValueError(f"Row labels have strands {invalid} not valid for {mode.value} mode")

    groups = pd.Series([_context_group(context) for context, _ in parts], index=matrix.index)
    known = strands != UNKNOWN_STRAND

    # group order follows first appearance in the matrix
    group_order = list(dict.fromkeys(groups[known]))
    first = matrix[strands == strand_1].groupby(groups[strands == strand_1], sort=False).sum()
    second = matrix[strands == strand_2].groupby(groups[strands == strand_2], sort=False).sum()
    first = first.reindex(group_order, fill_value=0)
    second = second.reindex(group_order, fill_value=0)

    records = []
    for sample in matrix.columns:
        for group in group_order:
            n1 = int(first.at[group, sample])
            n2 = int(second.at[group, sample])
            total = n1 + n2
            p_value = binomtest(n1, total, p).pvalue if total > 0 else 1.0
            if n2 > 0:
                ratio = n1 / n2
            else:
                ratio = np.inf if n1 > 0 else np.nan
            records.append({
                "sample": sample,
                "group": group,
                strand_1: n1,
                strand_2: n2,
                "total": total,
                "ratio": ratio,
                "p_value": p_value,
            })

    result = pd.DataFrame(
        records, columns=["sample", "group", strand_1, strand_2, "total", "ratio", "p_value"]
    )
    if len(result) > 0:
        result["fdr"] = false_discovery_control(result["p_value"].to_numpy(), method="bh")
    else:
        result["fdr"] = pd.Series(dtype=float)
    result["significance"] = [_significance(f) for f in result["fdr"]]
    return result
