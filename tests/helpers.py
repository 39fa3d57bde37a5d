"""Fakes for the remote conversion and font services."""

import base64
import io
import zipfile

from psd_packager.conversion import (
    ConversionOutcome,
    ConversionResult,
    Document,
    FontBinary,
    ImageAsset,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


def b64(data: bytes, mime: str | None = "image/png") -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}" if mime else encoded


class FakeConverter:
    """ConverterGateway returning canned outcomes keyed by document filename."""

    def __init__(self, outcomes=None, error: Exception | None = None):
        self.outcomes = outcomes or {}
        self.error = error
        self.calls: list[Document] = []

    def convert(self, document: Document) -> ConversionOutcome:
        self.calls.append(document)
        if self.error is not None:
            raise self.error
        return self.outcomes[document.filename]


class FakeFonts:
    """FontGateway that either returns the given binaries or fails."""

    def __init__(self, fonts=None, error: Exception | None = None):
        self.fonts = fonts or []
        self.error = error
        self.requested: list[list[str]] = []

    def fetch_fonts(self, names: list[str]) -> list[FontBinary]:
        self.requested.append(list(names))
        if self.error is not None:
            raise self.error
        return list(self.fonts)


def make_outcome(name="doc1", layers=("L1", "L2"), images=None, fonts=("Arial",)) -> ConversionOutcome:
    data = {"name": name, "layers": [{"name": layer} for layer in layers]}
    if images is None:
        images = [ImageAsset("a.png", b64(PNG_BYTES)), ImageAsset("b.png", b64(PNG_BYTES + b"b"))]
    return ConversionOutcome(result=ConversionResult(data), images=tuple(images), fonts=tuple(fonts))


def open_zip(content: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(content))


def top_level(zf: zipfile.ZipFile) -> set[str]:
    return {name.split("/", 1)[0] for name in zf.namelist()}
