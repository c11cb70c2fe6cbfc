"""Version information for thumbcache."""

__version__ = "0.3.0"
__version_display__ = f"thumbcache V{__version__}"
