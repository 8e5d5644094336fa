"""lang-tools: dead-declaration analysis for Java and Kotlin sources."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lang-tools")
except PackageNotFoundError:
    __version__ = "dev"
