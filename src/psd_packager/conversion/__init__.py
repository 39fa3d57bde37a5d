"""
Conversion layer.
Provides the gateway protocols for the remote services, their HTTP adapters,
and the controller that tracks one conversion request at a time.
"""

from .errors import ArchiveBuildError, ArchiveNotReadyError, ConversionError, FontFetchError
from .interfaces import (
    ConversionOutcome,
    ConversionResult,
    ConverterGateway,
    Document,
    FontBinary,
    FontGateway,
    ImageAsset,
)
from .service import ConversionController, ConversionState, ConversionStatus
