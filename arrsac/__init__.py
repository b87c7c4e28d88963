"""Adaptive Real-Time Random Sample Consensus; see the consensus module."""

__version__ = "0.10.0"
__all__ = ["consensus"]