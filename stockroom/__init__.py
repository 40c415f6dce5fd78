"""Stockroom — code-inventory storefront with manual payment approval."""

__version__ = "0.1.0"
