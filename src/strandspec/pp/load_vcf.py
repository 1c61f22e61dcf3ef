"""Load VCF files into per-sample mutation tables."""

import os
import warnings
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from cyvcf2 import VCF
from tqdm import tqdm

MUTATION_COLUMNS = ["chrom", "pos", "ref", "alt"]


def _empty_mutations() -> pd.DataFrame:
    return pd.DataFrame({
        "chrom": pd.Series(dtype=str),
        "pos": pd.Series(dtype=np.int64),
        "ref": pd.Series(dtype=str),
        "alt": pd.Series(dtype=str),
    })


def _to_frame(records: List[tuple]) -> pd.DataFrame:
    if not records:
        return _empty_mutations()
    df = pd.DataFrame(records, columns=MUTATION_COLUMNS)
    df["pos"] = df["pos"].astype(np.int64)
    return df


def _sample_name_from_path(vcf_path: str) -> str:
    name = os.path.basename(str(vcf_path))
    for suffix in (".gz", ".bgz", ".vcf", ".bcf"):
        name = name.removesuffix(suffix)
    return name


def load_vcf(
    vcf_path: str,
    samples: Optional[Sequence[str]] = None,
    genotypes: Iterable[int] = (1, 3),
    pass_only: bool = False,
    show_progress: bool = True
) -> Dict[str, pd.DataFrame]:
    """
    Load a VCF file into one mutation table per sample.

    For a multi-sample (joint-called) VCF a record belongs to every sample
    whose genotype is in ``genotypes``. A sites-only VCF (no sample columns)
    is treated as a single sample named after the file.

    Each table has columns:
    - 'chrom': Chromosome name
    - 'pos': 1-based position (matching VCF POS)
    - 'ref': Reference allele
    - 'alt': Alternate allele (multi-allelic records give one row per ALT)

    Duplicate records (same CHROM-POS-REF>ALT within a sample) are detected and
    only the first occurrence is kept, with a warning issued.

    Parameters
    ----------
    vcf_path : str
        Path to VCF file (.vcf, .vcf.gz or .bcf)
    samples : sequence of str, optional
        Subset of samples to load, in the order wanted. Defaults to all
        samples in VCF header order.
    genotypes : iterable of int, default (1, 3)
        cyvcf2 genotype codes counted as carrying the mutation
        (0=HOM_REF, 1=HET, 2=UNKNOWN, 3=HOM_ALT)
    pass_only : bool, default False
        Keep only records whose FILTER is PASS (or missing)
    show_progress : bool, default True
        Show progress bar during loading

    Returns
    -------
    dict of str to pd.DataFrame
        Mutation table per sample, in sample order

    Examples
    --------
    >>> import strandspec as ss
    >>> samples = ss.pp.load_vcf("cohort.vcf.gz", pass_only=True)
    >>> print({name: len(df) for name, df in samples.items()})
    """
    vcf = VCF(str(vcf_path))
    header_samples = list(vcf.samples)
    genotypes = np.asarray(list(genotypes))

    if not header_samples:
        sample_names = [_sample_name_from_path(vcf_path)]
        columns = None
    else:
        sample_names = list(samples) if samples is not None else header_samples
        unknown = [s for s in sample_names if s not in header_samples]
        if unknown:
            raise ValueError(f"Samples {unknown} not found in {vcf_path}. Available: {header_samples}")
        columns = np.array([header_samples.index(s) for s in sample_names])

    records = {name: [] for name in sample_names}
    seen = {name: set() for name in sample_names}
    n_filtered = 0
    n_missing_alt = 0
    n_duplicates = 0

    iterator = tqdm(vcf, desc="Loading VCF", unit=" sites") if show_progress else vcf

    for variant in iterator:
        if pass_only and variant.FILTER is not None:
            n_filtered += 1
            continue
        if not variant.ALT:
            n_missing_alt += 1
            continue

        if columns is None:
            carriers = sample_names
        else:
            gt_types = variant.gt_types[columns]
            carriers = [sample_names[i] for i in np.flatnonzero(np.isin(gt_types, genotypes))]

        for alt in variant.ALT:
            key = (variant.CHROM, variant.POS, variant.REF, alt)
            for name in carriers:
                if key in seen[name]:
                    n_duplicates += 1
                    continue
                seen[name].add(key)
                records[name].append(key)

    vcf.close()

    if show_progress and (n_filtered or n_missing_alt):
        print(f"Skipped {n_filtered} non-PASS records and {n_missing_alt} records with missing ALT alleles")

    if n_duplicates > 0:
        warnings.warn(
            f"Found {n_duplicates} duplicate variant records in {vcf_path} (same CHROM-POS-REF>ALT). "
            f"Kept first occurrence of each. Consider deduplicating your VCF with: "
            f"bcftools norm -d exact input.vcf.gz -Oz -o output.vcf.gz",
            UserWarning,
            stacklevel=2,
        )

    result = {name: _to_frame(records[name]) for name in sample_names}

    if show_progress:
        total = sum(len(df) for df in result.values())
        print(f"Done! Loaded {total} mutations across {len(result)} samples")

    return result


def load_vcfs(
    vcf_paths: Sequence[str],
    sample_names: Optional[Sequence[str]] = None,
    pass_only: bool = False,
    show_progress: bool = True
) -> Dict[str, pd.DataFrame]:
    """
    Load one VCF per sample, keeping every record of each file.

    Duplicate records (same CHROM-POS-REF>ALT within a file) are collapsed to
    their first occurrence and reported with a single warning.

    Parameters
    ----------
    vcf_paths : sequence of str
        One VCF per sample (e.g. somatic calls per tumour)
    sample_names : sequence of str, optional
        Names for the samples; defaults to the file names without extension
    pass_only : bool, default False
        Keep only records whose FILTER is PASS (or missing)
    show_progress : bool, default True
        Show progress bar

    Returns
    -------
    dict of str to pd.DataFrame
        Mutation table per sample, in input order

    Examples
    --------
    >>> import strandspec as ss
    >>> samples = ss.pp.load_vcfs(['colon1.vcf', 'colon2.vcf'], sample_names=['colon1', 'colon2'])
    """
    vcf_paths = list(vcf_paths)
    if sample_names is None:
        sample_names = [_sample_name_from_path(p) for p in vcf_paths]
    sample_names = list(sample_names)

    if len(sample_names) != len(vcf_paths):
        raise ValueError(f"Got {len(sample_names)} sample names for {len(vcf_paths)} VCF files")
    if len(set(sample_names)) != len(sample_names):
        raise ValueError("Sample names must be unique")

    result = {}
    iterator = tqdm(list(zip(sample_names, vcf_paths)), desc="Loading VCFs", unit="file") if show_progress else zip(sample_names, vcf_paths)

    duplicated_files = {}

    for name, path in iterator:
        vcf = VCF(str(path))
        records = []
        seen = set()
        n_duplicates = 0
        for variant in vcf:
            if pass_only and variant.FILTER is not None:
                continue
            for alt in variant.ALT:
                key = (variant.CHROM, variant.POS, variant.REF, alt)
                if key in seen:
                    n_duplicates += 1
                    continue
                seen.add(key)
                records.append(key)
        vcf.close()
        result[name] = _to_frame(records)
        if n_duplicates > 0:
            duplicated_files[str(path)] = n_duplicates

    if duplicated_files:
        warnings.warn(
            f"Found {sum(duplicated_files.values())} duplicate variant records (same CHROM-POS-REF>ALT) in "
            f"{', '.join(duplicated_files)}. Kept first occurrence of each. Consider deduplicating with: "
            f"bcftools norm -d exact input.vcf.gz -Oz -o output.vcf.gz",
            UserWarning,
            stacklevel=2,
        )

    if show_progress:
        total = sum(len(df) for df in result.values())
        print(f"Done! Loaded {total} mutations across {len(result)} samples")

    return result
