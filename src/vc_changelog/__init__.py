"""
Top-level package for vc_changelog.

This package sorts marker-tagged commits into a categorised changelog.
The CLI entry point lives in :mod:`vc_changelog.cli`; the classification
pipeline lives in :mod:`vc_changelog.parsing`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
