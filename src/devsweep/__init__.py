"""devsweep: find and remove disposable developer artifacts."""

__version__ = "0.1.0"
