"""Reference genome access."""

from typing import Dict, Mapping, Optional

from pyfaidx import Fasta


class ReferenceGenome:
    """
    Read-only handle on a reference genome.

    The FASTA file is opened lazily, so a handle can be sent to worker
    processes; each process opens its own pyfaidx index.

    Parameters
    ----------
    fasta_path : str
        Path to a FASTA file (an .fai index is built by pyfaidx if missing)

    Examples
    --------
    >>> ref = ReferenceGenome('hg38.fa')
    >>> ref.fetch('chr1', 999, 1002)  # 0-based, half-open
    'ACG'
    """

    def __init__(self, fasta_path: Optional[str] = None):
        self.fasta_path = None if fasta_path is None else str(fasta_path)
        self._fasta = None
        self._sequences: Optional[Dict[str, str]] = None

    @classmethod
    def from_sequences(cls, sequences: Mapping[str, str]) -> "ReferenceGenome":
        """Build an in-memory reference from a contig -> sequence mapping."""
        ref = cls()
        ref._sequences = {chrom: str(seq).upper() for chrom, seq in sequences.items()}
        return ref

    @property
    def fasta(self) -> Fasta:
        if self._fasta is None:
            if self.fasta_path is None:
                raise ValueError("ReferenceGenome has neither a FASTA path nor in-memory sequences")
            self._fasta = Fasta(self.fasta_path, sequence_always_upper=True)
        return self._fasta

    def __contains__(self, chrom: str) -> bool:
        if self._sequences is not None:
            return chrom in self._sequences
        return chrom in self.fasta.keys()

    def fetch(self, chrom: str, start: int, end: int) -> str:
        """
        Return the sequence of ``chrom`` in [start, end), 0-based.

        The interval is clipped to the contig; a contig missing from the
        reference raises KeyError.
        """
        start = max(start, 0)
        if self._sequences is not None:
            return self._sequences[chrom][start:end] if end > start else ""

        record = self.fasta[chrom]
        end = min(end, len(record))
        if end <= start:
            return ""
        return record[start:end].seq

    def __getstate__(self):
        state = self.__dict__.copy()
        state["_fasta"] = None
        return state

    def __repr__(self) -> str:
        if self._sequences is not None:
            return f"ReferenceGenome(<{len(self._sequences)} in-memory contigs>)"
        return f"ReferenceGenome('{self.fasta_path}')"
