"""Plot strand-stratified spectra and strand bias."""

from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from ..utils.categories import UNKNOWN_STRAND, split_category
from ..utils.constants import MUTATION_COLORS, STRAND_COLORS
from ..utils.context import substitution_type

_PANEL_COLOR = '#666666'


def _panel_of(context: str) -> str:
    """Panel a context is drawn in: substitution type, reference doublet or indel class."""
    if ">" in context and len(context) == 7:
        return substitution_type(context)
    if ">" in context:
        return context.split(">")[0]
    kind, subtype = context.split("_")[:2]
    return f"{kind}_{subtype}"


def _tick_label(context: str) -> str:
    if ">" in context and len(context) == 7:
        return context[0:3]
    if ">" in context:
        return context.split(">")[1]
    return context.split("_")[-1]


def _strand_table(counts: pd.Series, include_unknown: bool) -> Tuple[pd.DataFrame, List[str]]:
    """Reshape a category series into a contexts × strands table."""
    parts = [split_category(c) for c in counts.index]
    table = pd.DataFrame({
        "context": [context for context, _ in parts],
        "strand": [strand for _, strand in parts],
        "count": counts.to_numpy(),
    })
    if not include_unknown:
        table = table[table["strand"] != UNKNOWN_STRAND]
    strands = list(dict.fromkeys(table["strand"]))
    contexts = list(dict.fromkeys(table["context"]))
    wide = table.pivot(index="context", columns="strand", values="count").reindex(index=contexts, columns=strands)
    return wide.fillna(0), strands


def strand_spectrum(
    matrix: pd.DataFrame,
    sample: Optional[str] = None,
    aggregate: str = 'sum',
    normalize: bool = False,
    include_unknown: bool = False,
    outpath: Optional[str] = None,
    figsize: Tuple[int, int] = (24, 6),
    dpi: int = 600,
    title: Optional[str] = None,
    ylabel: Optional[str] = None,
    ylim: Optional[Tuple[float, float]] = None
) -> None:
    """
    Plot a strand-stratified spectrum with paired bars per context.

    SNV matrices are drawn in the six substitution-type panels, DBS matrices
    with one panel per reference doublet and indel matrices with one panel
    per indel class.

    Parameters
    ----------
    matrix : pd.DataFrame
        Stranded count matrix (categories × samples) from
        tl.compute_stranded_matrices
    sample : str, optional
        Sample to plot. If None, samples are aggregated.
    aggregate : str, default 'sum'
        'sum' or 'mean', used when sample is None
    normalize : bool, default False
        Normalize to proportions (sum to 1)
    include_unknown : bool, default False
        Also draw 'unknown' strand bars when the matrix has them
    outpath : str, optional
        Path to save figure
    figsize : tuple, default (24, 6)
        Figure size
    dpi : int, default 600
        DPI for saved figure
    title : str, optional
        Plot title
    ylabel : str, optional
        Y-axis label. If None, uses "Mutation count" or "Proportion" based on normalize
    ylim : tuple of (float, float), optional
        Y-axis limits as (ymin, ymax). If None, automatically calculated from data.

    Examples
    --------
    >>> import strandspec as ss
    >>> mat = ss.tl.compute_stranded_matrices(samples, ref, genes)
    >>> ss.pl.strand_spectrum(mat, title='All samples')
    >>> ss.pl.strand_spectrum(mat, sample='colon1', normalize=True, outpath='colon1_strand.png')
    """
    if sample is not None:
        if sample not in matrix.columns:
            raise ValueError(f"Sample '{sample}' not found in matrix. Available samples: {list(matrix.columns)}")
        counts = matrix[sample]
    elif aggregate == 'sum':
        counts = matrix.sum(axis=1)
    elif aggregate == 'mean':
        counts = matrix.mean(axis=1)
    else:
        raise ValueError(f"aggregate must be 'sum' or 'mean', got '{aggregate}'")

    table, strands = _strand_table(counts, include_unknown)
    if normalize and table.to_numpy().sum() > 0:
        table = table / table.to_numpy().sum()

    panels = list(dict.fromkeys(_panel_of(c) for c in table.index))

    fig, axes = plt.subplots(1, len(panels), figsize=figsize, sharey=True, squeeze=False)
    axes = axes[0]
    if title:
        fig.suptitle(title, fontsize=20, fontweight='bold')

    if ylim is not None:
        y_min, y_max = ylim
    else:
        y_min = 0
        y_max = max(table.to_numpy().max(), 1e-9) * 1.15

    if ylabel is None:
        ylabel = "Proportion" if normalize else "Mutation count"

    width = 0.8 / len(strands)
    for col, panel in enumerate(panels):
        ax = axes[col]
        contexts = [c for c in table.index if _panel_of(c) == panel]
        x_pos = np.arange(len(contexts))

        for i, strand in enumerate(strands):
            offset = (i - (len(strands) - 1) / 2) * width
            ax.bar(x_pos + offset, table.loc[contexts, strand], width=width,
                   color=STRAND_COLORS.get(strand, _PANEL_COLOR), edgecolor='none',
                   label=strand if col == 0 else None)

        # colored header patch
        rect = patches.Rectangle(
            (-0.5, y_max * 0.98), len(contexts), y_max * 0.02,
            linewidth=0, edgecolor='none', facecolor=MUTATION_COLORS.get(panel, _PANEL_COLOR)
        )
        ax.add_patch(rect)

        ax.set_xlim(-0.5, len(contexts) - 0.5)
        ax.set_ylim(y_min, y_max)
        ax.set_title(panel, fontweight='bold', fontsize=14)
        ax.set_xticks(x_pos)
        ax.set_xticklabels([_tick_label(c) for c in contexts], rotation=90, fontsize=8)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)

        if col == 0:
            ax.set_ylabel(ylabel, fontsize=14)
            ax.legend(frameon=False, fontsize=10)

    plt.tight_layout()

    if outpath:
        plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
        plt.close()
    else:
        plt.show()


def strand_bias(
    bias: pd.DataFrame,
    samples: Optional[List[str]] = None,
    outpath: Optional[str] = None,
    figsize: Optional[Tuple[int, int]] = None,
    dpi: int = 600,
    title: Optional[str] = None,
    ylabel: str = "Mutation count"
) -> None:
    """
    Plot strand counts per mutation group with significance stars.

    Parameters
    ----------
    bias : pd.DataFrame
        Output of tl.strand_bias_test
    samples : list of str, optional
        Samples to plot, one row each. If None, plots all samples.
    outpath : str, optional
        Path to save figure
    figsize : tuple, optional
        Figure size. If None, auto-calculated based on number of samples
    dpi : int, default 600
        DPI for saved figure
    title : str, optional
        Plot title
    ylabel : str, default "Mutation count"
        Y-axis label

    Examples
    --------
    >>> import strandspec as ss
    >>> bias = ss.tl.strand_bias_test(mat)
    >>> ss.pl.strand_bias(bias, samples=['colon1'], outpath='colon1_bias.png')
    """
    required = {"sample", "group", "significance"}
    if not required <= set(bias.columns) or len(bias.columns) < 4:
        raise ValueError("bias must be the output of tl.strand_bias_test")
    strands = list(bias.columns[2:4])

    if samples is None:
        samples = list(dict.fromkeys(bias["sample"]))
    missing = [s for s in samples if s not in set(bias["sample"])]
    if missing:
        raise ValueError(f"Samples not found in bias table: {missing}")

    if figsize is None:
        figsize = (12, 4 * len(samples))

    fig, axes = plt.subplots(len(samples), 1, figsize=figsize, squeeze=False)
    if title:
        fig.suptitle(title, fontsize=18, fontweight='bold')

    per_sample: Dict[str, pd.DataFrame] = {s: bias[bias["sample"] == s] for s in samples}
    for row, sample in enumerate(samples):
        ax = axes[row, 0]
        table = per_sample[sample]
        x_pos = np.arange(len(table))
        width = 0.4

        for i, strand in enumerate(strands):
            ax.bar(x_pos + (i - 0.5) * width, table[strand], width=width,
                   color=STRAND_COLORS.get(strand, _PANEL_COLOR), edgecolor='none', label=strand)

        tops = table[strands].max(axis=1).to_numpy()
        y_max = max(tops.max() if len(tops) else 0, 1) * 1.2
        for x, top, stars in zip(x_pos, tops, table["significance"]):
            if stars:
                ax.text(x, top + y_max * 0.02, stars, ha='center', va='bottom', fontsize=12)

        ax.set_ylim(0, y_max)
        ax.set_xticks(x_pos)
        ax.set_xticklabels(table["group"], rotation=90, fontsize=9)
        ax.set_title(sample, fontweight='bold', fontsize=14)
        ax.set_ylabel(ylabel, fontsize=12)
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)
        if row == 0:
            ax.legend(frameon=False, fontsize=10)

    plt.tight_layout()

    if outpath:
        plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
        plt.close()
    else:
        plt.show()
