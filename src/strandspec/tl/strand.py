"""Assign transcription or replication strand labels to mutations."""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..pp.ranges import GenomicRanges
from ..utils.categories import STRAND_LABELS, UNKNOWN_STRAND, StrandMode, resolve_mode
from ..utils.context import mutation_orientation, variant_class

AMBIGUOUS_POLICIES = ("first", "unknown")


def _orientation_or_none(ref: str, alt: str) -> Optional[str]:
    # unclassifiable alleles (long MNVs, missing ALT) cannot be oriented
    if variant_class(ref, alt) is None:
        return None
    return mutation_orientation(ref, alt)


@dataclass(frozen=True)
class StrandStrategy:
    """
    Base strand-assignment rule.

    Parameters
    ----------
    ambiguous : str, default 'first'
        What to do when a mutation overlaps several ranges with different labels:
        - 'first': use the first overlapping range in range order
        - 'unknown': label the mutation 'unknown'
    """

    ambiguous: str = "first"
    mode: ClassVar[StrandMode]
    needs_orientation: ClassVar[bool] = True

    def __post_init__(self):
        if self.ambiguous not in AMBIGUOUS_POLICIES:
            raise ValueError(
                f"Invalid ambiguous policy '{self.ambiguous}'. Must be one of: {', '.join(AMBIGUOUS_POLICIES)}"
            )

    @property
    def labels(self) -> Tuple[str, str]:
        return STRAND_LABELS[self.mode]

    @property
    def categories(self) -> Tuple[str, ...]:
        return self.labels + (UNKNOWN_STRAND,)

    def empty(self) -> pd.Categorical:
        return pd.Categorical([], categories=self.categories)

    def pick_range_label(self, range_labels: np.ndarray) -> Optional[str]:
        """Choose the annotation label among the overlapping ranges (in range order)."""
        if len(range_labels) == 0:
            return None
        if self.ambiguous == "unknown" and len(set(range_labels)) > 1:
            return None
        return range_labels[0]

    def strand_label(self, range_label: str, orientation: str) -> str:
        raise NotImplementedError

    def assign(self, mutations: pd.DataFrame, ranges: GenomicRanges) -> pd.Categorical:
        """
        Label every mutation with a strand, keeping input length and order.

        Parameters
        ----------
        mutations : pd.DataFrame
            Mutations with 'chrom', 'pos' (1-based), 'ref' and 'alt'; an
            'orientation' column (from type_context) is used when present
        ranges : GenomicRanges
            Annotation ranges of this strategy's mode

        Returns
        -------
        pd.Categorical
            Categories (strand_1, strand_2, 'unknown'). In transcription mode,
            mutations whose alleles cannot be oriented are 'unknown'.
        """
        if ranges.mode is not self.mode:
            raise ValueError(
                f"{self.mode.value} strand assignment needs {self.mode.value} ranges, "
                f"got ranges in {ranges.mode.value} mode"
            )
        if len(mutations) == 0:
            return self.empty()

        refs = mutations["ref"].astype(str).str.upper().to_numpy()
        if not self.needs_orientation:
            orientations = [None] * len(refs)
        elif "orientation" in mutations.columns:
            orientations = mutations["orientation"].to_numpy()
        else:
            alts = mutations["alt"].astype(str).str.upper().to_numpy()
            orientations = [_orientation_or_none(r, a) for r, a in zip(refs, alts)]

        strands = []
        chroms = mutations["chrom"].astype(str).to_numpy()
        positions = mutations["pos"].astype(np.int64).to_numpy()
        for chrom, pos, ref, orientation in zip(chroms, positions, refs, orientations):
            # footprint is the reference span of the mutation
            start = int(pos) - 1
            hits = ranges.overlaps(chrom, start, start + len(ref))
            range_label = self.pick_range_label(ranges.labels[hits])
            if range_label is None or (self.needs_orientation and orientation is None):
                strands.append(UNKNOWN_STRAND)
            else:
                strands.append(self.strand_label(range_label, orientation))

        return pd.Categorical(strands, categories=self.categories)


@dataclass(frozen=True)
class TranscriptionStrand(StrandStrategy):
    """
    Transcribed / untranscribed assignment against gene bodies.

    Genes are annotated on their coding (sense) strand. A mutation whose
    canonical pyrimidine base lies on the gene's strand sits on the
    untranscribed strand; on the opposite strand it sits on the transcribed
    (template) strand.
    """

    mode: ClassVar[StrandMode] = StrandMode.TRANSCRIPTION

    def strand_label(self, range_label: str, orientation: str) -> str:
        return "untranscribed" if orientation == range_label else "transcribed"


@dataclass(frozen=True)
class ReplicationStrand(StrandStrategy):
    """Left / right replication-direction assignment; the region label is copied."""

    mode: ClassVar[StrandMode] = StrandMode.REPLICATION
    needs_orientation: ClassVar[bool] = False

    def strand_label(self, range_label: str, orientation: str) -> str:
        return range_label


_STRATEGIES = {
    StrandMode.TRANSCRIPTION: TranscriptionStrand,
    StrandMode.REPLICATION: ReplicationStrand,
}


def get_strand_strategy(mode: Union[str, StrandMode] = "transcription", ambiguous: str = "first") -> StrandStrategy:
    """Return the strand-assignment strategy for a mode."""
    return _STRATEGIES[resolve_mode(mode)](ambiguous=ambiguous)


def assign_strands(
    mutations: pd.DataFrame,
    ranges: GenomicRanges,
    mode: Optional[Union[str, StrandMode]] = None,
    ambiguous: str = "first"
) -> pd.Categorical:
    """
    Assign a strand label to each mutation.

    Parameters
    ----------
    mutations : pd.DataFrame
        Mutations with 'chrom', 'pos' (1-based), 'ref', 'alt' and optionally
        'orientation'
    ranges : GenomicRanges
        Gene bodies (transcription) or replication-direction regions (replication)
    mode : str, optional
        'transcription' or 'replication'; defaults to the mode of ``ranges``
    ambiguous : str, default 'first'
        Multiple-overlap policy, 'first' or 'unknown'

    Returns
    -------
    pd.Categorical
        One label per mutation, same order; 'unknown' outside annotated ranges

    Examples
    --------
    >>> import strandspec as ss
    >>> snvs = ss.tl.type_context(samples['colon1'], ref, 'snv')
    >>> strands = ss.tl.assign_strands(snvs, genes)
    >>> pd.Series(strands).value_counts()

    Notes
    -----
    Transcription mode: a mutation is 'untranscribed' when its pyrimidine
    reference base is on the same strand as the overlapping gene, otherwise
    'transcribed'. Replication mode copies the region's 'left'/'right' label.
    """
    mode = ranges.mode if mode is None else resolve_mode(mode)
    return get_strand_strategy(mode, ambiguous).assign(mutations, ranges)
