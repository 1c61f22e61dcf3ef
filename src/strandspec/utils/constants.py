"""Constants used throughout strandspec."""

MUTATION_TYPES = ['C>A', 'C>G', 'C>T', 'T>A', 'T>C', 'T>G']

MUTATION_COLORS = {
    'C>A': '#00BCD4',  # Cyan
    'C>G': '#111111',  # Black
    'C>T': '#E62725',  # Red
    'T>A': '#D3D3D3',  # Light gray
    'T>C': '#99CC00',  # Green
    'T>G': '#FFADBA'   # Pink
}

STRAND_COLORS = {
    'transcribed': '#0072B2',
    'untranscribed': '#E69F00',
    'left': '#009E73',
    'right': '#CC79A7',
    'unknown': '#999999'
}

BASES = ["A", "C", "G", "T"]

# COSMIC doublet base substitution classes, in COSMIC order
DBS_TYPES = [
    'AC>CA', 'AC>CG', 'AC>CT', 'AC>GA', 'AC>GG', 'AC>GT', 'AC>TA', 'AC>TG', 'AC>TT',
    'AT>CA', 'AT>CC', 'AT>CG', 'AT>GA', 'AT>GC', 'AT>TA',
    'CC>AA', 'CC>AG', 'CC>AT', 'CC>GA', 'CC>GG', 'CC>GT', 'CC>TA', 'CC>TG', 'CC>TT',
    'CG>AT', 'CG>GC', 'CG>GT', 'CG>TA', 'CG>TC', 'CG>TT',
    'CT>AA', 'CT>AC', 'CT>AG', 'CT>GA', 'CT>GC', 'CT>GG', 'CT>TA', 'CT>TC', 'CT>TG',
    'GC>AA', 'GC>AG', 'GC>AT', 'GC>CA', 'GC>CG', 'GC>TA',
    'TA>AT', 'TA>CG', 'TA>CT', 'TA>GC', 'TA>GG', 'TA>GT',
    'TC>AA', 'TC>AG', 'TC>AT', 'TC>CA', 'TC>CG', 'TC>CT', 'TC>GA', 'TC>GG', 'TC>GT',
    'TG>AA', 'TG>AC', 'TG>AT', 'TG>CA', 'TG>CC', 'TG>CT', 'TG>GA', 'TG>GC', 'TG>GT',
    'TT>AA', 'TT>AC', 'TT>AG', 'TT>CA', 'TT>CC', 'TT>CG', 'TT>GA', 'TT>GC', 'TT>GG',
]

# Repeat / homology counts are capped at 5 and reported as '5+'
INDEL_COUNTS = ['0', '1', '2', '3', '4', '5+']
INDEL_LENGTHS = ['2', '3', '4', '5+']


def get_canonical_96_order():
    """
    The 96 SBS contexts in COSMIC order, as 'XYZ>XWZ' labels.

    Substitution type varies slowest, then the 5' base, then the 3' base.

    Examples
    --------
    >>> get_canonical_96_order()[:2]
    ['ACA>AAA', 'ACC>AAC']
    """
    return [
        f"{five}{sub[0]}{three}>{five}{sub[2]}{three}"
        for sub in MUTATION_TYPES
        for five in BASES
        for three in BASES
    ]


def get_dbs_78_order():
    """Return the 78 canonical doublet base substitution classes."""
    return list(DBS_TYPES)


def get_indel_83_order():
    """
    Generate the 83 COSMIC indel classes.

    Labels follow ``{DEL|INS}_{content}_{length}_{count}``: 1-bp deletions and
    insertions of C or T by homopolymer count, longer deletions and insertions
    by repeat count, and deletions at microhomologies by homology length.

    Examples
    --------
    >>> order = get_indel_83_order()
    >>> len(order)
    83
    >>> order[0], order[-1]
    ('DEL_C_1_0', 'DEL_MH_5+_5+')
    """
    order = []
    for kind in ("DEL", "INS"):
        for base in ("C", "T"):
            order.extend(f"{kind}_{base}_1_{count}" for count in INDEL_COUNTS)
    for kind in ("DEL", "INS"):
        for length in INDEL_LENGTHS:
            order.extend(f"{kind}_repeats_{length}_{count}" for count in INDEL_COUNTS)
    for length in INDEL_LENGTHS:
        # homology is always shorter than the deletion itself
        n_homology = 5 if length == '5+' else int(length) - 1
        order.extend(f"DEL_MH_{length}_{INDEL_COUNTS[k]}" for k in range(1, n_homology + 1))
    return order
