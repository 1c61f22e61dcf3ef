"""Closed vocabularies: mutation types, strand modes, strand labels and categories."""

from enum import Enum
from typing import Iterable, List, Tuple, Union

from .constants import get_canonical_96_order, get_dbs_78_order, get_indel_83_order

UNKNOWN_STRAND = "unknown"


class MutationType(str, Enum):
    SNV = "snv"
    DBS = "dbs"
    INDEL = "indel"


class StrandMode(str, Enum):
    TRANSCRIPTION = "transcription"
    REPLICATION = "replication"


STRAND_LABELS = {
    StrandMode.TRANSCRIPTION: ("transcribed", "untranscribed"),
    StrandMode.REPLICATION: ("left", "right"),
}

# Annotation labels a range may carry in each mode
RANGE_LABELS = {
    StrandMode.TRANSCRIPTION: ("+", "-"),
    StrandMode.REPLICATION: ("left", "right"),
}


def resolve_mode(mode: Union[str, StrandMode]) -> StrandMode:
    """Validate a strand mode, raising ValueError for anything outside the closed set."""
    try:
        return StrandMode(mode)
    except ValueError:
        valid = [m.value for m in StrandMode]
        raise ValueError(f"Invalid mode '{mode}'. Must be one of: {', '.join(valid)}") from None


def resolve_mutation_types(types: Union[str, MutationType, Iterable[str], None]) -> List[MutationType]:
    """
    Validate the requested mutation types.

    Parameters
    ----------
    types : str, MutationType, iterable of str, or None
        One of 'snv', 'dbs', 'indel', a collection of those, or 'all'.
        None means 'snv'.

    Returns
    -------
    list of MutationType
        Unique types in request order ('all' expands to snv, dbs, indel).

    Examples
    --------
    >>> resolve_mutation_types('all')
    [<MutationType.SNV: 'snv'>, <MutationType.DBS: 'dbs'>, <MutationType.INDEL: 'indel'>]
    """
    if types is None:
        return [MutationType.SNV]
    if isinstance(types, (str, MutationType)):
        types = [types]

    resolved = []
    for t in types:
        if t == "all":
            candidates = list(MutationType)
        else:
            try:
                candidates = [MutationType(t)]
            except ValueError:
                valid = [m.value for m in MutationType] + ["all"]
                raise ValueError(
                    f"Invalid mutation type '{t}'. Must be one of: {', '.join(valid)}"
                ) from None
        for candidate in candidates:
            if candidate not in resolved:
                resolved.append(candidate)

    if not resolved:
        raise ValueError("At least one mutation type must be requested")
    return resolved


def get_context_order(mutation_type: Union[str, MutationType]) -> List[str]:
    """Return the context alphabet of a mutation type in canonical order."""
    mutation_type = MutationType(mutation_type)
    if mutation_type is MutationType.SNV:
        return get_canonical_96_order()
    if mutation_type is MutationType.DBS:
        return get_dbs_78_order()
    return get_indel_83_order()


def get_strand_order(mode: Union[str, StrandMode], include_unknown: bool = False) -> List[str]:
    """Return the strand labels of a mode, optionally followed by 'unknown'."""
    labels = list(STRAND_LABELS[resolve_mode(mode)])
    if include_unknown:
        labels.append(UNKNOWN_STRAND)
    return labels


def get_category_order(
    mutation_type: Union[str, MutationType],
    mode: Union[str, StrandMode],
    include_unknown: bool = False
) -> List[str]:
    """
    Return the fixed (context, strand) category labels.

    Contexts vary slower than strands, labels are ``{context}_{strand}``.

    Examples
    --------
    >>> get_category_order('snv', 'transcription')[:2]
    ['ACA>AAA_transcribed', 'ACA>AAA_untranscribed']
    >>> len(get_category_order('indel', 'replication', include_unknown=True))
    249
    """
    strands = get_strand_order(mode, include_unknown)
    return [f"{context}_{strand}" for context in get_context_order(mutation_type) for strand in strands]


def split_category(category: str) -> Tuple[str, str]:
    """Split a category label into (context, strand)."""
    context, _, strand = category.rpartition("_")
    return context, strand
