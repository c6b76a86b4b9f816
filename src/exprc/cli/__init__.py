"""
exprc Command-Line Interface
============================

This package provides the `exprc` command, a Click-based driver that reads
one expression and writes the selected backend artifacts.
"""

__all__ = ["exprc"]
