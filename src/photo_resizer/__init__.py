"""Fit photos and signatures to fixed pixel dimensions and byte budgets."""

__version__ = "0.1.0"
