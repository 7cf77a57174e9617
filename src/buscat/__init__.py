"""buscat: cat to and from a message bus subject."""

from buscat.config import VERSION as __version__

__all__ = ["__version__"]
