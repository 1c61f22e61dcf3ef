"""Preprocessing functions for strandspec."""

from .load_vcf import load_vcf, load_vcfs
from .convert import samples_from_anndata
from .reference import ReferenceGenome
from .ranges import GenomicRanges, load_gene_ranges, load_replication_ranges

__all__ = [
    'load_vcf',
    'load_vcfs',
    'samples_from_anndata',
    'ReferenceGenome',
    'GenomicRanges',
    'load_gene_ranges',
    'load_replication_ranges'
]
