"""Utility functions and constants for strandspec."""

from .constants import (
    MUTATION_TYPES,
    MUTATION_COLORS,
    STRAND_COLORS,
    DBS_TYPES,
    get_canonical_96_order,
    get_dbs_78_order,
    get_indel_83_order
)

from .categories import (
    UNKNOWN_STRAND,
    MutationType,
    StrandMode,
    resolve_mode,
    resolve_mutation_types,
    get_context_order,
    get_strand_order,
    get_category_order,
    split_category
)

from .context import (
    reverse_complement,
    pyrimidine_context,
    standardize_doublet,
    variant_class,
    mutation_orientation,
    parse_variant_id,
    substitution_type
)

from .parallel import SampleProcessingError, available_parallelism, map_samples

__all__ = [
    'MUTATION_TYPES',
    'MUTATION_COLORS',
    'STRAND_COLORS',
    'DBS_TYPES',
    'get_canonical_96_order',
    'get_dbs_78_order',
    'get_indel_83_order',
    'UNKNOWN_STRAND',
    'MutationType',
    'StrandMode',
    'resolve_mode',
    'resolve_mutation_types',
    'get_context_order',
    'get_strand_order',
    'get_category_order',
    'split_category',
    'reverse_complement',
    'pyrimidine_context',
    'standardize_doublet',
    'variant_class',
    'mutation_orientation',
    'parse_variant_id',
    'substitution_type',
    'SampleProcessingError',
    'available_parallelism',
    'map_samples'
]
