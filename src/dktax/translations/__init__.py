"""Packaged JSON translation catalogues (one file per locale)."""
