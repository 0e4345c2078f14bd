"""Subsampling-aware resampling evaluation for class-imbalanced data."""

__version__ = "0.1.0"
