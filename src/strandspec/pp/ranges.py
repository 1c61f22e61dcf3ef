"""Genomic annotation ranges: gene bodies with strand, replication-direction regions."""

from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..utils.categories import RANGE_LABELS, StrandMode, resolve_mode

_LABEL_COLUMNS = {
    StrandMode.TRANSCRIPTION: "strand",
    StrandMode.REPLICATION: "strand_info",
}


class GenomicRanges:
    """
    Labelled genomic intervals with an overlap index.

    Intervals are 0-based and half-open. Each range carries exactly one kind
    of label: ``strand`` ('+' or '-') for gene bodies used in transcription
    mode, or ``strand_info`` ('left' or 'right') for replication-direction
    regions used in replication mode.

    Parameters
    ----------
    chrom, start, end : array-like
        Interval coordinates (0-based, half-open)
    labels : array-like
        Per-range label
    mode : str
        'transcription' or 'replication'; decides which labels are valid

    Examples
    --------
    >>> genes = GenomicRanges(['chr1', 'chr1'], [100, 500], [400, 900], ['+', '-'], mode='transcription')
    >>> genes.overlaps('chr1', 350, 351)
    array([0])
    """

    def __init__(
        self,
        chrom: Iterable[str],
        start: Iterable[int],
        end: Iterable[int],
        labels: Iterable[str],
        mode: Union[str, StrandMode] = "transcription"
    ):
        self.mode = resolve_mode(mode)
        self.chrom = np.asarray(list(chrom), dtype=object).astype(str)
        self.start = np.asarray(list(start), dtype=np.int64)
        self.end = np.asarray(list(end), dtype=np.int64)
        self.labels = np.asarray([str(label) for label in labels], dtype=object)

        n = len(self.chrom)
        if not (len(self.start) == len(self.end) == len(self.labels) == n):
            raise ValueError("chrom, start, end and labels must have the same length")
        if np.any(self.end <= self.start):
            raise ValueError("Every range must satisfy end > start (0-based, half-open)")

        valid = RANGE_LABELS[self.mode]
        invalid = sorted(set(self.labels) - set(valid))
        if invalid:
            raise ValueError(
                f"Invalid {self.label_column} values {invalid} for {self.mode.value} mode. "
                f"Must be one of: {', '.join(valid)}"
            )

        self._index = self._build_index()

    @property
    def label_column(self) -> str:
        return _LABEL_COLUMNS[self.mode]

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        mode: Optional[Union[str, StrandMode]] = None,
        one_based: bool = False
    ) -> "GenomicRanges":
        """
        Build ranges from a table with 'chrom', 'start', 'end' and a label column.

        Parameters
        ----------
        df : pd.DataFrame
            Must contain 'chrom', 'start', 'end' and either 'strand'
            (transcription) or 'strand_info' (replication)
        mode : str, optional
            Inferred from the label column when omitted
        one_based : bool, default False
            Set when 'start' is 1-based and 'end' inclusive (GTF, GRanges)
        """
        missing = {"chrom", "start", "end"} - set(df.columns)
        if missing:
            raise ValueError(f"ranges table is missing required columns: {sorted(missing)}")

        if mode is None:
            if "strand_info" in df.columns:
                mode = StrandMode.REPLICATION
            elif "strand" in df.columns:
                mode = StrandMode.TRANSCRIPTION
            else:
                raise ValueError("ranges table must contain a 'strand' or 'strand_info' column")
        mode = resolve_mode(mode)

        label_column = _LABEL_COLUMNS[mode]
        if label_column not in df.columns:
            raise ValueError(f"{mode.value} mode requires a '{label_column}' column in the ranges table")

        start = df["start"].astype(np.int64).to_numpy()
        if one_based:
            start = start - 1
        return cls(df["chrom"], start, df["end"].astype(np.int64), df[label_column], mode=mode)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            "chrom": self.chrom,
            "start": self.start,
            "end": self.end,
            self.label_column: self.labels,
        })

    def _build_index(self) -> Dict[str, Tuple[np.ndarray, np.ndarray, np.ndarray, int]]:
        # per contig: starts (sorted), ends, original indices, longest range
        index = {}
        for chrom in np.unique(self.chrom):
            idx = np.flatnonzero(self.chrom == chrom)
            order = np.argsort(self.start[idx], kind="stable")
            idx = idx[order]
            lengths = self.end[idx] - self.start[idx]
            index[chrom] = (self.start[idx], self.end[idx], idx, int(lengths.max()))
        return index

    @property
    def chromosomes(self) -> List[str]:
        return list(self._index)

    def overlaps(self, chrom: str, start: int, end: int) -> np.ndarray:
        """
        Indices of ranges overlapping [start, end), in input order.

        Returns an empty array when the contig is not annotated.
        """
        if chrom not in self._index:
            return np.empty(0, dtype=np.int64)
        starts, ends, idx, max_len = self._index[chrom]
        lo = np.searchsorted(starts, start - max_len, side="left")
        hi = np.searchsorted(starts, end, side="left")
        candidates = slice(lo, hi)
        hits = idx[candidates][ends[candidates] > start]
        return np.sort(hits)

    def __len__(self) -> int:
        return len(self.chrom)

    def __repr__(self) -> str:
        return f"GenomicRanges({len(self)} ranges, mode='{self.mode.value}', {len(self._index)} contigs)"


def load_gene_ranges(path: str, feature: str = "gene") -> GenomicRanges:
    """
    Load gene bodies with their coding strand.

    Parameters
    ----------
    path : str
        BED file (columns chrom, start, end, name, score, strand; 0-based) or
        GTF/GFF file (1-based, inclusive); detected by extension, gzip allowed
    feature : str, default 'gene'
        Feature type kept from GTF/GFF files

    Returns
    -------
    GenomicRanges
        Ranges in transcription mode

    Examples
    --------
    >>> import strandspec as ss
    >>> genes = ss.pp.load_gene_ranges('genes_hg38.bed')
    """
    name = str(path).lower().removesuffix(".gz")

    if name.endswith((".gtf", ".gff", ".gff3")):
        df = pd.read_csv(path, sep="\t", comment="#", header=None, usecols=[0, 2, 3, 4, 6], dtype={0: str})
        df.columns = ["chrom", "feature", "start", "end", "strand"]
        df = df[df["feature"] == feature]
        if df.empty:
            raise ValueError(f"No '{feature}' features found in {path}")
        return GenomicRanges.from_dataframe(df, mode="transcription", one_based=True)

    df = pd.read_csv(path, sep="\t", comment="#", header=None, dtype={0: str})
    if df.shape[1] < 6:
        raise ValueError(f"Gene BED file {path} needs at least 6 columns (strand in column 6), got {df.shape[1]}")
    df = df.iloc[:, [0, 1, 2, 5]]
    df.columns = ["chrom", "start", "end", "strand"]
    return GenomicRanges.from_dataframe(df, mode="transcription")


def load_replication_ranges(
    path: str,
    chrom_col: str = "Chr",
    start_col: str = "Start",
    end_col: str = "Stop",
    label_col: str = "Class",
    chrom_prefix: Optional[str] = None
) -> GenomicRanges:
    """
    Load replication-direction regions.

    Parameters
    ----------
    path : str
        Whitespace-delimited table with a header row and 0-based starts
    chrom_col, start_col, end_col, label_col : str
        Column names; labels must be 'left' or 'right'
    chrom_prefix : str, optional
        Prefix added to contig names lacking it (e.g. 'chr' to match UCSC-style
        reference and VCF naming)

    Returns
    -------
    GenomicRanges
        Ranges in replication mode

    Examples
    --------
    >>> import strandspec as ss
    >>> repli = ss.pp.load_replication_ranges('ReplicationDirectionRegions.bed', chrom_prefix='chr')
    """
    df = pd.read_csv(path, sep=r"\s+")
    missing = {chrom_col, start_col, end_col, label_col} - set(df.columns)
    if missing:
        raise ValueError(f"Replication table {path} is missing columns: {sorted(missing)}")

    chrom = df[chrom_col].astype(str)
    if chrom_prefix:
        chrom = chrom.where(chrom.str.startswith(chrom_prefix), chrom_prefix + chrom)

    table = pd.DataFrame({
        "chrom": chrom,
        "start": df[start_col],
        "end": df[end_col],
        "strand_info": df[label_col].astype(str).str.lower(),
    })
    return GenomicRanges.from_dataframe(table, mode="replication")
