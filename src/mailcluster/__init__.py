"""Density-based email clustering with incremental nearest-core assignment."""

__version__ = "0.1.0"
