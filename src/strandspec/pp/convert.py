"""Convert AnnData variant matrices into per-sample mutation tables."""

from typing import Dict, Optional

import anndata as ad
import numpy as np
import pandas as pd
from scipy.sparse import issparse

from ..utils.context import parse_variant_id
from .load_vcf import MUTATION_COLUMNS, _to_frame


def samples_from_anndata(
    adata: ad.AnnData,
    genotypes: Optional[list[int]] = None,
    layer: Optional[str] = None,
    chrom_prefix: Optional[str] = None
) -> Dict[str, pd.DataFrame]:
    """
    Split a cells/samples × variants AnnData into one mutation table per observation.

    Variant names must follow the 'chr-pos-ref>alt' convention (pos 1-based),
    as produced by joint-calling loaders storing genotypes in ``.X``.

    Parameters
    ----------
    adata : ad.AnnData
        Observations are samples or cells, variables are variants
    genotypes : list of int, optional
        Genotype codes counted as carrying the variant. If None, any
        value > 0 counts (binary presence).
    layer : str, optional
        Layer to read instead of ``.X``
    chrom_prefix : str, optional
        Expected chromosome prefix in variant names

    Returns
    -------
    dict of str to pd.DataFrame
        Mutation table (chrom, pos, ref, alt) per observation, in obs order

    Examples
    --------
    >>> import strandspec as ss
    >>> samples = ss.pp.samples_from_anndata(adata, genotypes=[1, 3])
    >>> matrix = ss.tl.compute_stranded_matrices(samples, 'hg38.fa', genes)

    Notes
    -----
    Variants whose names cannot be parsed are dropped for every observation.
    """
    X = adata.layers[layer] if layer is not None else adata.X
    if issparse(X):
        X = X.toarray()
    X = np.asarray(X)

    parsed = [parse_variant_id(v, chrom_prefix) for v in adata.var_names]
    valid = np.array([p is not None for p in parsed], dtype=bool)
    variants = pd.DataFrame([p for p in parsed if p is not None], columns=MUTATION_COLUMNS)

    samples = {}
    for obs_idx, name in enumerate(adata.obs_names):
        values = X[obs_idx, valid]
        if genotypes is None:
            mask = values > 0
        else:
            mask = np.isin(values, genotypes)
        rows = variants.loc[mask]
        samples[str(name)] = _to_frame(list(rows.itertuples(index=False, name=None)))

    return samples
