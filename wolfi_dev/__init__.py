"""Developer helpers for Wolfi packages and Chainguard images."""

__version__ = "0.1.0"
