"""Command line interface for the furniture search engine."""
