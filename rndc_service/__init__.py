"""RNDC submission service — remesas and manifiestos for the national cargo registry."""

__version__ = "0.1.0"
