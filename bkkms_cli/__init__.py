"""Command line client for the bookmark KMS service."""

__version__ = "0.1.0"
