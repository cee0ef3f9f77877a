"""Content-keyed artifact cache for build pipelines."""

__version__ = "0.1.0"
