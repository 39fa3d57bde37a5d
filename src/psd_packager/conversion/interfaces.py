from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Document:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class ConversionResult:
    """Structured description of one converted document.

    Wraps the raw JSON mapping returned by the service so it can be written
    back out unchanged (key order included).
    """

    data: dict[str, object]

    @property
    def name(self) -> str:
        return str(self.data["name"])  # type: ignore[index]

    @property
    def layers(self) -> list[object]:
        layers = self.data.get("layers") or []
        return list(layers)  # type: ignore[call-overload]


@dataclass(frozen=True)
class ImageAsset:
    name: str
    payload: str


@dataclass(frozen=True)
class FontBinary:
    name: str
    payload: str


@dataclass(frozen=True)
class ConversionOutcome:
    """The result triple. Always handed around as one unit."""

    result: ConversionResult
    images: tuple[ImageAsset, ...] = field(default_factory=tuple)
    fonts: tuple[str, ...] = field(default_factory=tuple)


class ConverterGateway(Protocol):
    def convert(self, document: Document) -> ConversionOutcome:
        """Submit the document and return the parsed triple.

        This is a blocking call; callers should offload to threads if needed.
        Raises ConversionError on a non-success response or transport failure.
        """


class FontGateway(Protocol):
    def fetch_fonts(self, names: list[str]) -> list[FontBinary]:
        """Resolve font names to binaries. Raises FontFetchError on failure."""
