"""Plotting functions for strandspec."""

from .strand import strand_spectrum, strand_bias

__all__ = [
    'strand_spectrum',
    'strand_bias'
]
