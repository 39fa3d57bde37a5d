"""Unit tests for the packaging CLI."""

import asyncio

import pytest
import typer
from typer.testing import CliRunner

from psd_packager import cli
from psd_packager.conversion import ConversionError, FontFetchError, ImageAsset

from helpers import FakeConverter, FakeFonts, make_outcome, open_zip

runner = CliRunner()


@pytest.mark.unit
def test_run_pipeline_writes_archive(tmp_path, document, outcome):
    target = asyncio.run(
        cli.run_pipeline(document, FakeConverter({"doc1.psd": outcome}), FakeFonts(), tmp_path / "out")
    )

    assert target == tmp_path / "out" / "doc1.zip"
    with open_zip(target.read_bytes()) as zf:
        assert "json/doc1.json" in zf.namelist()


@pytest.mark.unit
def test_run_pipeline_exits_on_conversion_failure(tmp_path, document):
    converter = FakeConverter(error=ConversionError("corrupt file"))

    with pytest.raises(typer.Exit) as exc:
        asyncio.run(cli.run_pipeline(document, converter, FakeFonts(), tmp_path))

    assert exc.value.exit_code == 1
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_package_command(tmp_path, monkeypatch):
    psd = tmp_path / "Banner.psd"
    psd.write_bytes(b"8BPS-fake")
    outcome = make_outcome(name="banner", images=[ImageAsset("broken.png", "@@")])
    monkeypatch.setattr(cli, "HttpConverter", lambda base, timeout: FakeConverter({"Banner.psd": outcome}))
    monkeypatch.setattr(cli, "HttpFontFetcher", lambda base, timeout: FakeFonts(error=FontFetchError("down")))

    result = runner.invoke(cli.app, ["package", str(psd), "--output-dir", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "banner.zip").exists()
    assert "skipped: Error adding image broken.png" in result.output
    assert "skipped: Failed to fetch font files: down" in result.output


@pytest.mark.unit
def test_package_command_rejects_empty_file(tmp_path):
    psd = tmp_path / "empty.psd"
    psd.write_bytes(b"")

    result = runner.invoke(cli.app, ["package", str(psd)])

    assert result.exit_code == 1
