"""Classify mutations into sequence-context categories."""

import warnings
from typing import Optional, Union

import numpy as np
import pandas as pd

from ..pp.reference import ReferenceGenome
from ..utils.categories import MutationType, resolve_mutation_types
from ..utils.context import (
    indel_sequence,
    mutation_orientation,
    pyrimidine_context,
    standardize_doublet,
    variant_class,
)

REQUIRED_COLUMNS = ("chrom", "pos", "ref", "alt")

# normalize 1-bp indels to C or T
_INDEL_COMP = {"A": "T", "C": "C", "G": "C", "T": "T"}
_ACGT = frozenset("ACGT")


def _is_acgt(seq: str) -> bool:
    return len(seq) > 0 and set(seq) <= _ACGT


def _count_label(n: int) -> str:
    return "5+" if n >= 5 else str(n)


def _count_repeats(seq: str, downstream: str) -> int:
    """Copies of seq directly at the start of downstream, capped at 5."""
    n = 0
    step = len(seq)
    while n < 5 and downstream[n * step:(n + 1) * step] == seq:
        n += 1
    return n


def check_mutations(mutations: pd.DataFrame) -> None:
    if not isinstance(mutations, pd.DataFrame):
        raise TypeError(f"mutations must be a pandas.DataFrame, got {type(mutations)}")
    missing = set(REQUIRED_COLUMNS) - set(mutations.columns)
    if missing:
        raise ValueError(f"mutations is missing required columns: {sorted(missing)}")


def snv_context(reference: ReferenceGenome, chrom: str, pos: int, ref: str, alt: str) -> Optional[str]:
    """Trinucleotide substitution label (e.g. 'ACA>AAA') of an SNV, or None."""
    if not (_is_acgt(ref) and _is_acgt(alt)):
        return None
    # pos is 1-based; [pos-2, pos+1) in 0-based is the base before, the base, the base after
    trinuc = reference.fetch(chrom, pos - 2, pos + 1)
    if len(trinuc) != 3 or trinuc[1] != ref or not _is_acgt(trinuc):
        return None
    return pyrimidine_context(trinuc, alt)


def dbs_context(reference: ReferenceGenome, chrom: str, pos: int, ref: str, alt: str) -> Optional[str]:
    """Canonical doublet label (e.g. 'CC>TT') of a DBS, or None."""
    if not (_is_acgt(ref) and _is_acgt(alt)):
        return None
    if reference.fetch(chrom, pos - 1, pos + 1) != ref:
        return None
    return standardize_doublet(ref, alt)


def indel_context(reference: ReferenceGenome, chrom: str, pos: int, ref: str, alt: str) -> Optional[str]:
    """
    COSMIC indel label of an anchored, left-normalised indel, or None.

    Deletions look like TAAA>T and insertions like G>GCA, with POS on the
    shared anchor base.
    """
    is_deletion = len(ref) > len(alt)
    anchor, longer = (alt, ref) if is_deletion else (ref, alt)
    if not anchor or longer[:len(anchor)] != anchor:
        return None

    seq = indel_sequence(ref, alt)
    if not _is_acgt(seq):
        return None
    size = len(seq)
    size_label = _count_label(size)

    # 0-based coordinate of the first base after the anchor
    event_start = pos - 1 + len(anchor)

    if not is_deletion:
        repeats = _count_repeats(seq, reference.fetch(chrom, event_start, event_start + 5 * size))
        if size == 1:
            return f"INS_{_INDEL_COMP[seq]}_1_{_count_label(repeats)}"
        return f"INS_repeats_{size_label}_{_count_label(repeats)}"

    event_end = event_start + size
    if reference.fetch(chrom, event_start, event_end) != seq:
        return None
    repeats = _count_repeats(seq, reference.fetch(chrom, event_end, event_end + 5 * size))

    if size == 1:
        return f"DEL_{_INDEL_COMP[seq]}_1_{_count_label(repeats)}"
    if repeats > 0:
        return f"DEL_repeats_{size_label}_{_count_label(repeats)}"

    # microhomology: longest deleted prefix repeated right, or deleted suffix repeated left
    right = reference.fetch(chrom, event_end, event_end + size)
    left = reference.fetch(chrom, event_start - size, event_start)
    mh_right = 0
    while mh_right < len(right) and right[mh_right] == seq[mh_right]:
        mh_right += 1
    mh_left = 0
    while mh_left < len(left) and left[-1 - mh_left] == seq[-1 - mh_left]:
        mh_left += 1
    homology = min(max(mh_left, mh_right), size - 1)

    if homology > 0:
        return f"DEL_MH_{size_label}_{_count_label(homology)}"
    return f"DEL_repeats_{size_label}_0"


_CLASSIFIERS = {
    MutationType.SNV: snv_context,
    MutationType.DBS: dbs_context,
    MutationType.INDEL: indel_context,
}


def type_context(
    mutations: pd.DataFrame,
    reference: Union[ReferenceGenome, str],
    mutation_type: Union[str, MutationType] = "snv",
    warn: bool = True
) -> pd.DataFrame:
    """
    Select the mutations of one type and derive their context labels.

    Parameters
    ----------
    mutations : pd.DataFrame
        Mutation table with 'chrom', 'pos' (1-based), 'ref' and 'alt'
    reference : ReferenceGenome or str
        Reference genome handle or FASTA path
    mutation_type : str, default 'snv'
        'snv', 'dbs' or 'indel'
    warn : bool, default True
        Warn when some mutations of the type cannot be given a context

    Returns
    -------
    pd.DataFrame
        The mutations of the requested type (fresh 0..n-1 index) with two
        added columns:
        - 'context': label from the type's alphabet, NaN when unresolvable
          (unknown contig, reference mismatch, non-ACGT bases, contig edge,
          complex indel)
        - 'orientation': '+' when the canonical form is read on the forward
          strand, '-' when it was reverse complemented

    Examples
    --------
    >>> import strandspec as ss
    >>> ref = ss.pp.ReferenceGenome('hg38.fa')
    >>> snvs = ss.tl.type_context(samples['colon1'], ref, 'snv')
    >>> snvs['context'].value_counts().head()

    Notes
    -----
    SNVs are reported on the pyrimidine (C/T) reference base, doublets in
    the 78 canonical COSMIC forms, indels in the 83 COSMIC classes. Indels
    must be anchored and left-normalised (``bcftools norm``).
    """
    check_mutations(mutations)
    mutation_type = resolve_mutation_types(mutation_type)[0]
    if not isinstance(reference, ReferenceGenome):
        reference = ReferenceGenome(reference)

    refs = mutations["ref"].astype(str).str.upper().to_numpy()
    alts = mutations["alt"].astype(str).str.upper().to_numpy()
    classes = np.array([variant_class(r, a) for r, a in zip(refs, alts)], dtype=object)
    selected = classes == mutation_type.value

    typed = pd.DataFrame({
        "chrom": mutations["chrom"].astype(str).to_numpy()[selected],
        "pos": mutations["pos"].astype(np.int64).to_numpy()[selected],
        "ref": refs[selected],
        "alt": alts[selected],
    })

    classify = _CLASSIFIERS[mutation_type]
    contexts = []
    for chrom, pos, ref, alt in typed.itertuples(index=False, name=None):
        try:
            contexts.append(classify(reference, chrom, int(pos), ref, alt))
        except KeyError:
            # contig absent from the reference
            contexts.append(None)

    typed["context"] = pd.Series(contexts, dtype=object)
    typed["orientation"] = pd.Series(
        [mutation_orientation(r, a) for r, a in zip(typed["ref"], typed["alt"])], dtype=object
    )

    n_unresolved = int(typed["context"].isna().sum())
    if warn and n_unresolved > 0:
        warnings.warn(
            f"Could not determine the {mutation_type.value} context of {n_unresolved} of {len(typed)} mutations "
            f"(unknown contig, reference mismatch, non-ACGT bases or complex indel). They are not counted.",
            UserWarning,
            stacklevel=2,
        )

    return typed
