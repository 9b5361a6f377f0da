"""Install and manage compiled binaries from GitHub releases and download URLs."""

__version__ = "0.6.0"