"""
livesync version constants.

The cache schema version is stored next to every cached document so that
older cache files can be recognised when the format changes.
"""

# Library version (matches pyproject.toml)
LIVESYNC_VERSION = "0.1.0"

# Schema version for the document cache table
# Increment when the cached format changes in a breaking way
CACHE_SCHEMA_VERSION = "document_cache_v0"
