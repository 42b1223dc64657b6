"""Zotero plugin scaffolder with a content-integrity audit."""

__version__ = "0.1.0"
