"""Unit tests for archive name helpers."""

import re

import pytest

from psd_packager.archive.naming import PLACEHOLDER_NAME, archive_filename, sanitize

ALLOWED = re.compile(r"[a-z0-9_-]*")


@pytest.mark.unit
def test_sanitize_replaces_disallowed_characters():
    assert sanitize("My Skin (v2).psd") == "my_skin__v2__psd"


@pytest.mark.unit
def test_sanitize_keeps_allowed_characters():
    assert sanitize("button-hover_01") == "button-hover_01"


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", None])
def test_sanitize_empty_maps_to_placeholder(name):
    assert sanitize(name) == PLACEHOLDER_NAME


@pytest.mark.unit
@pytest.mark.parametrize("name", ["../../etc/passwd", "Ünïcödé", "İstanbul", "a/b\\c", "KELVIN K", "tab\there"])
def test_sanitize_output_charset_and_idempotence(name):
    once = sanitize(name)
    assert ALLOWED.fullmatch(once)
    assert sanitize(once) == once


@pytest.mark.unit
def test_archive_filename():
    assert archive_filename("doc1") == "doc1.zip"
