"""beadui - browse and edit bd issues across many directories."""

from beadui._version import version as __version__

__all__ = ["__version__"]
