"""SpaceWx command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``spacewx`` script).
"""

from spacewx.cli.main import cli

__all__ = ["cli"]
