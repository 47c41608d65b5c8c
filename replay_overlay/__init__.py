"""Logic layer of the replay overlay: host state mirror and view model sync."""

__version__ = "0.4.0"
