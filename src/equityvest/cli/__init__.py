"""Command line interface for equityvest."""
