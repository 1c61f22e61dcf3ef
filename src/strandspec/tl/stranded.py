"""Compute strand-stratified mutation count matrices."""

import warnings
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..pp.ranges import GenomicRanges
from ..pp.reference import ReferenceGenome
from ..utils.categories import (
    UNKNOWN_STRAND,
    MutationType,
    StrandMode,
    get_category_order,
    resolve_mode,
    resolve_mutation_types,
)
from ..utils.parallel import map_samples, resolve_n_jobs
from .context import check_mutations, type_context
from .occurrences import strand_occurrences
from .strand import StrandStrategy, get_strand_strategy


@dataclass(frozen=True)
class SampleCounts:
    """Result of counting one sample for one mutation type."""

    sample: str
    counts: pd.Series
    n_mutations: int
    n_unknown: int
    n_unclassified: int

    @property
    def is_empty(self) -> bool:
        """True when the sample has no mutations of this type."""
        return self.n_mutations == 0


def count_sample(
    sample: str,
    mutations: pd.DataFrame,
    reference: ReferenceGenome,
    ranges: GenomicRanges,
    strategy: StrandStrategy,
    mutation_type: MutationType,
    include_unknown: bool = False
) -> SampleCounts:
    """
    Classify, strand-assign and count the mutations of one sample.

    A sample without mutations of the type yields a zero-filled row.
    """
    typed = type_context(mutations, reference, mutation_type, warn=False)
    classified = typed[typed["context"].notna()]

    if len(classified) == 0:
        strands = strategy.empty()
    else:
        strands = strategy.assign(classified, ranges)

    counts = strand_occurrences(
        classified["context"].to_numpy(),
        strands,
        mutation_type=mutation_type,
        mode=strategy.mode,
        include_unknown=include_unknown,
    )
    counts.name = sample

    return SampleCounts(
        sample=sample,
        counts=counts,
        n_mutations=len(typed),
        n_unknown=int((np.asarray(strands, dtype=object) == UNKNOWN_STRAND).sum()),
        n_unclassified=len(typed) - len(classified),
    )


def _normalize_samples(
    samples: Union[Mapping[str, pd.DataFrame], Iterable[Tuple[str, pd.DataFrame]]]
) -> List[Tuple[str, pd.DataFrame]]:
    items = list(samples.items()) if isinstance(samples, Mapping) else list(samples)
    if not items:
        raise ValueError("No samples given")

    names = []
    for item in items:
        if not (isinstance(item, tuple) and len(item) == 2):
            raise TypeError("samples must be a mapping or an iterable of (name, mutations) pairs")
        name, mutations = item
        check_mutations(mutations)
        names.append(str(name))

    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        raise ValueError(f"Sample names must be unique, duplicated: {duplicated}")
    return [(name, mutations) for name, (_, mutations) in zip(names, items)]


def _assemble_matrix(
    rows: List[SampleCounts],
    mutation_type: MutationType,
    mode: StrandMode,
    include_unknown: bool,
    ambiguous: str
) -> pd.DataFrame:
    categories = get_category_order(mutation_type, mode, include_unknown)

    # samples x categories, then transpose to categories x samples
    table = pd.DataFrame(
        np.vstack([row.counts.reindex(categories).to_numpy() for row in rows]),
        index=[row.sample for row in rows],
        columns=categories,
    )
    matrix = table.T.astype(np.int64)

    matrix.attrs = {
        "mode": mode.value,
        "mutation_type": mutation_type.value,
        "include_unknown": include_unknown,
        "ambiguous": ambiguous,
        "n_unknown_strand": {row.sample: row.n_unknown for row in rows},
        "n_unclassified": {row.sample: row.n_unclassified for row in rows},
    }
    return matrix


def compute_stranded_matrices(
    samples: Union[Mapping[str, pd.DataFrame], Iterable[Tuple[str, pd.DataFrame]]],
    reference: Union[ReferenceGenome, str],
    ranges: GenomicRanges,
    mode: str = "transcription",
    types: Union[str, Iterable[str], None] = "snv",
    n_jobs: Optional[int] = None,
    ambiguous: str = "first",
    include_unknown: bool = False,
    show_progress: bool = True
) -> Union[pd.DataFrame, Dict[str, pd.DataFrame]]:
    """
    Make strand-stratified mutation count matrices.

    For every requested mutation type, each sample's mutations are given a
    context label and a strand label and counted per (context, strand)
    category. Samples are processed independently, in parallel.

    Parameters
    ----------
    samples : mapping or iterable of (str, pd.DataFrame)
        Mutation table per sample with 'chrom', 'pos' (1-based), 'ref', 'alt',
        e.g. from pp.load_vcf or pp.samples_from_anndata. Sample order is kept.
    reference : ReferenceGenome or str
        Reference genome handle or FASTA path
    ranges : GenomicRanges
        Gene bodies with strand (transcription mode) or replication-direction
        regions (replication mode), see pp.load_gene_ranges and
        pp.load_replication_ranges
    mode : str, default 'transcription'
        'transcription' or 'replication'
    types : str or list of str, default 'snv'
        'snv', 'dbs', 'indel', a list of those, or 'all'
    n_jobs : int, optional
        Number of worker processes. If None, uses the available CPUs, or 1
        on platforms without fork-based multiprocessing.
    ambiguous : str, default 'first'
        Policy for mutations overlapping ranges with conflicting labels:
        'first' (first range in range order) or 'unknown'
    include_unknown : bool, default False
        Add an 'unknown' strand row per context for mutations outside the
        annotated ranges. If False they are left out of the matrix and their
        number is recorded in ``matrix.attrs['n_unknown_strand']``.
    show_progress : bool, default True
        Show progress bar

    Returns
    -------
    pd.DataFrame or dict of str to pd.DataFrame
        Count matrix (categories × samples) when one mutation type is
        produced, otherwise a dict mapping type name to matrix.
        Category labels are '{context}_{strand}', e.g. 'ACA>AAA_transcribed'.

    Examples
    --------
    >>> import strandspec as ss
    >>> samples = ss.pp.load_vcfs(['colon1.vcf', 'colon2.vcf'])
    >>> ref = ss.pp.ReferenceGenome('hg19.fa')
    >>> genes = ss.pp.load_gene_ranges('genes_hg19.bed')
    >>>
    >>> # 192-row matrix of SNVs on transcribed / untranscribed strands
    >>> mat = ss.tl.compute_stranded_matrices(samples, ref, genes)
    >>>
    >>> # Replication strand, all mutation types
    >>> repli = ss.pp.load_replication_ranges('ReplicationDirectionRegions.bed', chrom_prefix='chr')
    >>> mats = ss.tl.compute_stranded_matrices(samples, ref, repli, mode='replication', types='all')
    >>> mats['snv'].shape

    Notes
    -----
    In transcription mode a mutation type absent from every sample gives an
    all-zero matrix. In replication mode such a type is left out of the
    result, so ``types='all'`` may return fewer than three matrices.

    Column sums equal the number of mutations of the type with a resolvable
    context and a known strand (or any strand with include_unknown=True).

    If any sample fails, the whole computation stops with a
    SampleProcessingError naming that sample.
    """
    # Validate configuration before doing any work
    mode = resolve_mode(mode)
    mutation_types = resolve_mutation_types(types)
    strategy = get_strand_strategy(mode, ambiguous)
    n_jobs = resolve_n_jobs(n_jobs)

    if not isinstance(ranges, GenomicRanges):
        raise TypeError(f"ranges must be a GenomicRanges object, got {type(ranges)}")
    if ranges.mode is not mode:
        raise ValueError(
            f"mode='{mode.value}' needs {mode.value} ranges "
            f"(with '{'strand' if mode is StrandMode.TRANSCRIPTION else 'strand_info'}' labels), "
            f"got ranges in {ranges.mode.value} mode"
        )
    if not isinstance(reference, ReferenceGenome):
        reference = ReferenceGenome(reference)

    sample_items = _normalize_samples(samples)

    sample_chroms = set()
    for _, mutations in sample_items:
        sample_chroms.update(mutations["chrom"].astype(str).unique())
    if sample_chroms and not sample_chroms & set(ranges.chromosomes):
        warnings.warn(
            f"None of the mutation chromosomes ({', '.join(sorted(sample_chroms)[:3])}, ...) occur in the "
            f"annotation ranges ({', '.join(ranges.chromosomes[:3])}, ...). Every mutation will get an "
            f"'unknown' strand; check the chromosome naming style.",
            UserWarning,
            stacklevel=2,
        )

    matrices = {}
    for mutation_type in mutation_types:
        tasks = [
            (name, (name, mutations, reference, ranges, strategy, mutation_type, include_unknown))
            for name, mutations in sample_items
        ]
        rows = map_samples(
            count_sample,
            tasks,
            n_jobs=n_jobs,
            mutation_type=mutation_type.value,
            show_progress=show_progress,
            desc=f"Counting {mutation_type.value} ({mode.value})",
        )

        if mode is StrandMode.REPLICATION and all(row.is_empty for row in rows):
            if show_progress:
                print(f"No {mutation_type.value} mutations in any sample; skipping {mutation_type.value}")
            continue

        n_unclassified = sum(row.n_unclassified for row in rows)
        if n_unclassified > 0:
            warnings.warn(
                f"{n_unclassified} {mutation_type.value} mutations had no resolvable context and were not counted. "
                f"Check that the reference genome matches the variant calls.",
                UserWarning,
                stacklevel=2,
            )

        matrices[mutation_type.value] = _assemble_matrix(rows, mutation_type, mode, include_unknown, ambiguous)

    if len(matrices) == 1:
        return next(iter(matrices.values()))
    return matrices
