"""EMR batch-ingestion cluster controller.

Builds a declarative EMR cluster description into a single ``RunJobFlow``
request, tracks the launched cluster's handle, and feeds work steps to it.
"""

try:
    from importlib.metadata import version

    __version__ = version("emr-batch-ingest")
except Exception:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
