"""
Archive assembly: turns a converted document into the downloadable zip.
"""

from .builder import Archive, ArchiveBuilder, AssetOutcome, decode_payload
from .naming import archive_filename, sanitize
