"""
strandspec: Strand-stratified mutation count matrices

A scanpy-style API for counting somatic mutations per sequence context and
per strand (transcribed / untranscribed or leading-left / right replication
direction) across many samples.

The API is organized into three modules:
- pp: Preprocessing (loading VCFs, reference genome, annotation ranges)
- tl: Tools (context classification, strand assignment, count matrices, strand bias)
- pl: Plotting (visualization)

Matrices are pandas DataFrames with one row per (context, strand) category,
labelled '{context}_{strand}', and one column per sample.

Example usage:
    import strandspec as ss

    # Preprocessing
    samples = ss.pp.load_vcfs(['colon1.vcf.gz', 'colon2.vcf.gz'])
    ref = ss.pp.ReferenceGenome('hg19.fa')
    genes = ss.pp.load_gene_ranges('genes_hg19.bed')

    # Tools
    mat = ss.tl.compute_stranded_matrices(samples, ref, genes, types='snv')
    bias = ss.tl.strand_bias_test(mat)

    # Plotting
    ss.pl.strand_spectrum(mat, title='Transcriptional strand')
    ss.pl.strand_bias(bias)
"""

from importlib.metadata import version

from . import pl, pp, tl, utils

__all__ = ["pl", "pp", "tl", "utils"]

__version__ = version("strandspec")
