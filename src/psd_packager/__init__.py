"""
PSD Packager package.

Submits PSD documents to a remote conversion service and packages the
returned layer description, extracted images and fonts into a zip archive.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
