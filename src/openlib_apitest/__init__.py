"""Integration tests for the OpenLibrary author API, sharing scenario state between behave and pytest."""

from .constants import VERSION as __version__
