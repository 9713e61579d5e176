"""objstore - a minimal cached object storage service over HTTP."""

__version__ = "0.1.0"
