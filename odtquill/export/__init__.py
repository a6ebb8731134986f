"""Output packaging."""

from .package_writer import PackageWriter, minify_tree

__all__ = ["PackageWriter", "minify_tree"]
