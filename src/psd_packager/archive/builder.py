import asyncio
import base64
import binascii
import io
import json
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from ..conversion.errors import ArchiveBuildError, ArchiveNotReadyError
from ..conversion.interfaces import ConversionResult, FontGateway, ImageAsset
from ..conversion.service import ConversionState
from .naming import archive_filename, sanitize

logger = logging.getLogger(__name__)

NO_FONTS_MARKER = "No fonts detected"


@dataclass(frozen=True)
class AssetOutcome:
    """Result of staging one image or font: either written, or an error message."""

    kind: str
    name: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def log_line(self) -> str:
        return f"Error adding {self.kind} {self.name}: {self.error}"


@dataclass(frozen=True)
class Archive:
    document_name: str
    filename: str
    content: bytes
    failures: tuple[str, ...] = field(default_factory=tuple)


def decode_payload(payload: str) -> bytes:
    """Decode base64 text, accepting an optional `data:<mime>;base64,` prefix."""
    if "," in payload:
        payload = payload.split(",", 1)[1]
    if not payload:
        raise ValueError("empty payload")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 data ({e})") from e


def fonts_listing(font_names: Sequence[str]) -> str:
    body = "\n".join(font_names) if font_names else NO_FONTS_MARKER
    return f"Detected fonts:\n{body}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _ArchiveTree:
    """In-memory folder tree, serialized to a zip only once it is complete."""

    def __init__(self) -> None:
        self._folders: list[str] = []
        self._files: dict[str, bytes] = {}

    def folder(self, path: str) -> None:
        if path not in self._folders:
            self._folders.append(path)

    def write(self, path: str, data: bytes | str) -> None:
        if not path or path.endswith("/"):
            raise ValueError(f"invalid file path {path!r}")
        if path in self._files:
            raise ValueError(f"duplicate entry {path!r}")
        self._files[path] = data.encode("utf-8") if isinstance(data, str) else data

    def to_zip(self, stamp: datetime) -> bytes:
        """Serialize with every entry dated `stamp`, so equal trees give equal bytes."""
        date_time = stamp.timetuple()[:6]
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            for folder in self._folders:
                info = zipfile.ZipInfo(folder, date_time=date_time)
                info.external_attr = (0o40755 << 16) | 0x10
                zf.writestr(info, b"")
            for path, data in self._files.items():
                info = zipfile.ZipInfo(path, date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                zf.writestr(info, data)
        return buf.getvalue()


class ArchiveBuilder:
    """Assembles the downloadable archive for one converted document.

    Layout::

        fonts/fonts.txt
        fonts/<fontName>
        json/<documentName>.json
        logs/<documentName>.log
        logs/<documentName>_errors.log
        skins/<documentName>/<imageName>

    A bad image or font is recorded in the errors log and skipped. A failed
    font lookup is recorded the same way and the archive ships without font
    files. Only a failure to serialize the zip aborts the build.
    """

    def __init__(
        self,
        fonts: FontGateway,
        *,
        sanitize_names: bool = False,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._fonts = fonts
        self._sanitize_names = sanitize_names
        self._clock = clock

    async def package(self, state: ConversionState, original_name: str) -> Archive:
        """Build the archive for a READY controller state."""
        if not state.is_ready:
            raise ArchiveNotReadyError(f"no converted document to package (state: {state.status})")
        outcome = state.outcome
        assert outcome is not None
        return await self.build(outcome.result, outcome.images, outcome.fonts, original_name)

    async def build(
        self,
        result: ConversionResult,
        images: Sequence[ImageAsset],
        font_names: Sequence[str],
        original_name: str,
    ) -> Archive:
        doc_name = sanitize(result.name) if self._sanitize_names else result.name
        skins_dir = f"skins/{doc_name}/"
        errors_log = f"logs/{doc_name}_errors.log"

        now = self._clock()
        tree = _ArchiveTree()
        for folder in ("fonts/", "json/", "logs/", "skins/", skins_dir):
            tree.folder(folder)

        tree.write("fonts/fonts.txt", fonts_listing(font_names))
        tree.write(f"json/{doc_name}.json", json.dumps(result.data, indent=2, ensure_ascii=False))
        tree.write(f"logs/{doc_name}.log", self._summary(now, result, original_name, images, font_names))

        failures: list[str] = []

        image_outcomes = [self._stage(tree, "image", skins_dir, img.name, img.payload) for img in images]
        failures.extend(_fold_failures(image_outcomes))

        try:
            font_files = await asyncio.to_thread(self._fonts.fetch_fonts, list(font_names))
        except Exception as e:
            logger.warning("Failed to fetch font files for %s: %s", doc_name, e)
            failures.append(f"Failed to fetch font files: {e}")
            font_files = []
        font_outcomes = [self._stage(tree, "font", "fonts/", font.name, font.payload) for font in font_files]
        failures.extend(_fold_failures(font_outcomes))

        if failures:
            tree.write(errors_log, "".join(f"{line}\n" for line in failures))

        try:
            content = await asyncio.to_thread(tree.to_zip, now)
        except Exception as e:
            logger.error("Failed to create ZIP for %s: %s", doc_name, e)
            raise ArchiveBuildError(str(e) or "Failed to create ZIP") from e

        logger.info(
            "Built %s: %d/%d images, %d font files, %d failures",
            archive_filename(doc_name),
            sum(o.ok for o in image_outcomes),
            len(image_outcomes),
            sum(o.ok for o in font_outcomes),
            len(failures),
        )
        return Archive(
            document_name=doc_name,
            filename=archive_filename(doc_name),
            content=content,
            failures=tuple(failures),
        )

    def _summary(
        self,
        now: datetime,
        result: ConversionResult,
        original_name: str,
        images: Sequence[ImageAsset],
        font_names: Sequence[str],
    ) -> str:
        stamp = now.isoformat().replace("+00:00", "Z")
        return (
            f"PSD processed on {stamp}\n"
            f"Original file: {original_name}\n"
            f"Document layers: {len(result.layers)}\n"
            f"Images processed: {len(images)}\n"
            f"Fonts detected: {len(font_names)}"
        )

    @staticmethod
    def _stage(tree: _ArchiveTree, kind: str, folder: str, name: str, payload: str) -> AssetOutcome:
        try:
            if not name:
                raise ValueError(f"{kind} has no name")
            tree.write(folder + name, decode_payload(payload))
        except Exception as e:
            logger.warning("Error adding %s %s: %s", kind, name, e)
            return AssetOutcome(kind=kind, name=name, error=str(e))
        return AssetOutcome(kind=kind, name=name)


def _fold_failures(outcomes: Iterable[AssetOutcome]) -> list[str]:
    return [o.log_line() for o in outcomes if not o.ok]
