"""
CLI module for MHTML extraction.
"""

from mhtml_stream.cli.extract import main as extract_main

__all__ = ["extract_main"]
