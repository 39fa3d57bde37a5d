"""
PSD packaging CLI

Converts a PSD through the remote conversion service and writes the packaged
archive to disk, or launches the Streamlit page.

Commands:
    package - Convert a PSD file and write <documentName>.zip
    ui      - Launch the Streamlit front-end

Examples:\n

    psd-packager package banner.psd                      # Writes ./<name>.zip

    psd-packager package banner.psd -o out/ --sanitize   # Safe file/folder names

    psd-packager ui                                      # Start the web page
"""

import asyncio
import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from psd_packager.archive import ArchiveBuilder
from psd_packager.config import API_BASE, FONTS_TIMEOUT_SEC, LOG_LEVEL, SANITIZE_NAMES, UPLOAD_TIMEOUT_SEC
from psd_packager.conversion import (
    ArchiveBuildError,
    ConversionController,
    ConversionStatus,
    ConverterGateway,
    Document,
    FontGateway,
)
from psd_packager.conversion.adapters import HttpConverter, HttpFontFetcher

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Convert PSD documents and package the result as a zip archive",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    logging.basicConfig(level=LOG_LEVEL)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


async def run_pipeline(
    document: Document,
    converter: ConverterGateway,
    fonts: FontGateway,
    output_dir: Path,
    *,
    sanitize_names: bool = False,
) -> Path:
    """Convert, build and write the archive. Returns the written path."""
    controller = ConversionController(converter)
    state = await controller.request_conversion(document)
    if state.status != ConversionStatus.READY:
        typer.echo(f"Error: {state.error}", err=True)
        raise typer.Exit(code=1)

    builder = ArchiveBuilder(fonts, sanitize_names=sanitize_names)
    try:
        archive = await builder.package(state, document.filename)
    except ArchiveBuildError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / archive.filename
    await asyncio.to_thread(target.write_bytes, archive.content)

    for line in archive.failures:
        typer.echo(f"  skipped: {line}")
    return target


@app.command("package")
def package_command(
    psd_file: Annotated[
        Path,
        typer.Argument(help="PSD document to convert", exists=True, dir_okay=False, readable=True),
    ],
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory for the generated zip"),
    ] = Path("."),
    api_base: Annotated[
        Optional[str],
        typer.Option("--api-base", help="Conversion service base URL (default: PSD_PACKAGER_API_BASE)"),
    ] = None,
    sanitize_names: Annotated[
        bool,
        typer.Option("--sanitize/--no-sanitize", help="Restrict archive folder/file names to [a-z0-9_-]"),
    ] = SANITIZE_NAMES,
):
    """Convert a PSD file and write <documentName>.zip."""
    content = psd_file.read_bytes()
    if not content:
        typer.echo(f"Error: {psd_file} is empty", err=True)
        raise typer.Exit(code=1)

    base = api_base or API_BASE
    document = Document(filename=psd_file.name, content=content, content_type="image/vnd.adobe.photoshop")
    target = asyncio.run(
        run_pipeline(
            document,
            HttpConverter(base, timeout=UPLOAD_TIMEOUT_SEC),
            HttpFontFetcher(base, timeout=FONTS_TIMEOUT_SEC),
            output_dir,
            sanitize_names=sanitize_names,
        )
    )
    typer.echo(f"✓ Wrote {target}")


@app.command("ui")
def ui_command():
    """Launch the Streamlit front-end."""
    page = Path(__file__).with_name("streamlit_app.py")
    raise typer.Exit(code=subprocess.call([sys.executable, "-m", "streamlit", "run", str(page)]))


if __name__ == "__main__":
    app()
