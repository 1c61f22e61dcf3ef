"""Tools for strand-stratified mutation counting."""

from .context import type_context
from .strand import ReplicationStrand, TranscriptionStrand, assign_strands, get_strand_strategy
from .occurrences import strand_occurrences
from .stranded import SampleCounts, compute_stranded_matrices, count_sample
from .strand_bias import strand_bias_test
from ..utils.parallel import SampleProcessingError

__all__ = [
    "type_context",
    "assign_strands",
    "get_strand_strategy",
    "TranscriptionStrand",
    "ReplicationStrand",
    "strand_occurrences",
    "compute_stranded_matrices",
    "count_sample",
    "SampleCounts",
    "SampleProcessingError",
    "strand_bias_test",
]
