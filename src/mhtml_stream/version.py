"""
Version constants for the MHTML parsing service.
"""

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
PARSER_VERSION = "mhtml-parser-1.0.0"
