"""Build Xcode asset catalogs from directories of SVG images."""

__version__ = "0.1.0"
