"""Client binding for the Dropbox API v2: implicit-grant OAuth and basic file operations."""

__version__ = "0.1.0"
