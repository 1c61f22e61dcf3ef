"""Sequence-context utilities."""

import re
from typing import Optional, Tuple

from Bio.Seq import Seq

from .constants import DBS_TYPES

_DBS_SET = frozenset(DBS_TYPES)


def reverse_complement(seq: str) -> str:
    """Reverse complement of a DNA sequence, e.g. 'ATG' -> 'CAT'."""
    return str(Seq(seq).reverse_complement())


def pyrimidine_context(trinuc: str, alt: str) -> str:
    """
    Label a trinucleotide substitution on its pyrimidine strand.

    Labels have the form 'XYZ>XWZ' with Y the reference pyrimidine (C or T).
    Substitutions of a purine are read on the opposite strand.

    Parameters
    ----------
    trinuc : str
        Reference bases before, at and after the mutated position
    alt : str
        Alternate base

    Examples
    --------
    >>> pyrimidine_context('TCG', 'T')
    'TCG>TTG'
    >>> pyrimidine_context('AGT', 'C')
    'ACT>AGT'
    """
    if trinuc[1] in "AG":
        trinuc, alt = reverse_complement(trinuc), reverse_complement(alt)
    return f"{trinuc}>{trinuc[0]}{alt}{trinuc[2]}"


def standardize_doublet(ref: str, alt: str) -> Optional[str]:
    """
    Convert a doublet substitution into its canonical COSMIC form.

    The doublet is reverse complemented when the forward form is not one of the
    78 canonical classes. Returns None when neither form is canonical (for
    example when one of the two positions is not actually substituted).

    Examples
    --------
    >>> standardize_doublet('CC', 'TT')
    'CC>TT'
    >>> standardize_doublet('GG', 'AA')
    'CC>TT'
    """
    doublet = f"{ref}>{alt}"
    if doublet in _DBS_SET:
        return doublet
    flipped = f"{reverse_complement(ref)}>{reverse_complement(alt)}"
    if flipped in _DBS_SET:
        return flipped
    return None


def variant_class(ref: str, alt: str) -> Optional[str]:
    """
    Classify a REF/ALT pair as 'snv', 'dbs' or 'indel'.

    Returns None for multi-base substitutions longer than two bases and for
    records without a usable ALT allele.

    Examples
    --------
    >>> variant_class('C', 'T'), variant_class('CC', 'TT'), variant_class('CA', 'C')
    ('snv', 'dbs', 'indel')
    """
    if not alt or alt == "." or alt == ref:
        return None
    if len(ref) != len(alt):
        return "indel"
    if len(ref) == 1:
        return "snv"
    if len(ref) == 2:
        return "dbs"
    return None


def indel_sequence(ref: str, alt: str) -> str:
    """Return the inserted or deleted bases of an anchored indel."""
    if len(ref) > len(alt):
        return ref[len(alt):]
    return alt[len(ref):]


def mutation_orientation(ref: str, alt: str) -> str:
    """
    Return the reference strand on which the canonical form of a mutation is read.

    '+' means the pyrimidine-based (or canonical doublet) form is read on the
    forward strand, '-' means it was reverse complemented. Indels are oriented
    by the first inserted or deleted base.

    Examples
    --------
    >>> mutation_orientation('C', 'A'), mutation_orientation('G', 'T')
    ('+', '-')
    """
    kind = variant_class(ref, alt)
    if kind == "snv":
        return "+" if ref in "CT" else "-"
    if kind == "dbs":
        return "+" if f"{ref}>{alt}" in _DBS_SET else "-"
    if kind == "indel":
        return "+" if indel_sequence(ref, alt)[:1] in ("C", "T") else "-"
    raise ValueError(f"Cannot orient mutation {ref}>{alt}")


def parse_variant_id(variant_id: str, chrom_prefix: Optional[str] = None) -> Optional[Tuple[str, int, str, str]]:
    """
    Split a 'chrom-pos-ref>alt' variant name into (chrom, pos, ref, alt).

    Returns None when the name does not follow that convention, or when
    ``chrom_prefix`` is given and the contig name lacks it.

    Examples
    --------
    >>> parse_variant_id('chr1-12345-A>T', chrom_prefix='chr')
    ('chr1', 12345, 'A', 'T')
    >>> parse_variant_id('I-12345-CA>C')
    ('I', 12345, 'CA', 'C')
    """
    prefix = re.escape(chrom_prefix) if chrom_prefix else ""
    found = re.fullmatch(rf"({prefix}\w+)-(\d+)-([ACGT.]+)>([ACGT.]+)", variant_id)
    if found is None:
        return None
    chrom, pos, ref, alt = found.groups()
    return chrom, int(pos), ref, alt


def substitution_type(context: str) -> str:
    """Six-class substitution type of an SNV context label, e.g. 'ACA>AAA' -> 'C>A'."""
    if len(context) != 7 or context[3] != ">":
        raise ValueError(f"Invalid SNV context label: {context}")
    return f"{context[1]}>{context[5]}"
