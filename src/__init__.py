"""vidlearn: interactive learning apps generated from videos."""

from vidlearn.version import __version__

__all__ = ["__version__"]
