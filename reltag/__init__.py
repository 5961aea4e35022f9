"""Signed, changelog-backed release tagging for git repositories."""

__version__ = "0.3.0"
