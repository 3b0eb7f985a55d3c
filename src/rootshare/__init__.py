"""RootShare - Sandboxed File Manager Server."""

__app_name__ = "RootShare"
__version__ = "1.0.0"
