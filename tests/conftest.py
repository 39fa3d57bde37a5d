import pytest

from psd_packager.conversion import Document

from helpers import make_outcome


@pytest.fixture
def outcome():
    return make_outcome()


@pytest.fixture
def document() -> Document:
    return Document(filename="doc1.psd", content=b"8BPS-fake-psd")
