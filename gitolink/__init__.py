"""GitoLink - link-in-bio profiles with click analytics."""

__version__ = "0.1.0"
