"""Count mutations per (context, strand) category."""

from typing import Sequence, Union

import numpy as np
import pandas as pd

from ..utils.categories import (
    UNKNOWN_STRAND,
    MutationType,
    StrandMode,
    get_category_order,
    get_context_order,
    get_strand_order,
    resolve_mode,
    resolve_mutation_types,
)


def strand_occurrences(
    contexts: Sequence[str],
    strands: Sequence[str],
    mutation_type: Union[str, MutationType] = "snv",
    mode: Union[str, StrandMode] = "transcription",
    include_unknown: bool = False
) -> pd.Series:
    """
    Count mutations in every (context, strand) category.

    Parameters
    ----------
    contexts : sequence of str
        Context label per mutation (from tl.type_context)
    strands : sequence of str
        Strand label per mutation (from tl.assign_strands), aligned with contexts
    mutation_type : str, default 'snv'
        Decides the context alphabet
    mode : str, default 'transcription'
        Decides the strand labels
    include_unknown : bool, default False
        If True, 'unknown' is a third strand of every context. If False,
        mutations with an 'unknown' strand are not part of the row.

    Returns
    -------
    pd.Series
        Integer counts indexed by the full category order (e.g. 192 rows
        for SNVs); unobserved categories are 0.

    Examples
    --------
    >>> row = strand_occurrences(['ACA>AAA', 'ACA>AAA'], ['transcribed', 'unknown'])
    >>> row['ACA>AAA_transcribed'], row['ACA>AAA_untranscribed'], len(row)
    (1, 0, 192)
    """
    mutation_type = resolve_mutation_types(mutation_type)[0]
    mode = resolve_mode(mode)

    contexts = np.asarray(contexts, dtype=object)
    strands = np.asarray(strands, dtype=object)
    if len(contexts) != len(strands):
        raise ValueError(f"contexts and strands must have the same length, got {len(contexts)} and {len(strands)}")

    alphabet = get_context_order(mutation_type)
    bad_contexts = sorted({str(c) for c in contexts} - set(alphabet))
    if bad_contexts:
        raise ValueError(f"Contexts outside the {mutation_type.value} alphabet: {bad_contexts[:5]}")

    valid_strands = get_strand_order(mode, include_unknown=True)
    bad_strands = sorted({str(s) for s in strands} - set(valid_strands))
    if bad_strands:
        raise ValueError(f"Invalid strand labels for {mode.value} mode: {bad_strands}. Must be one of: {', '.join(valid_strands)}")

    categories = get_category_order(mutation_type, mode, include_unknown)

    if not include_unknown:
        keep = strands != UNKNOWN_STRAND
        contexts, strands = contexts[keep], strands[keep]

    labels = pd.Series([f"{c}_{s}" for c, s in zip(contexts, strands)], dtype=object)
    counts = labels.value_counts().reindex(categories, fill_value=0).astype(np.int64)
    counts.name = "count"
    return counts
