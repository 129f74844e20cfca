"""Oracle client wrapping the external analysis call."""

from ebook_analyzer.oracle.client import OracleClient

__all__ = ["OracleClient"]
