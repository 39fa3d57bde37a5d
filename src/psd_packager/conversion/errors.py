class ConversionError(Exception):
    """The conversion request failed; the message is shown to the user as-is."""


class FontFetchError(Exception):
    """The font-binary request failed as a whole."""


class ArchiveBuildError(Exception):
    """Serializing the archive failed; no partial output is produced."""


class ArchiveNotReadyError(Exception):
    """Packaging was requested before a conversion succeeded."""
