"""Global Python virtual environment management built on uv."""

__version__ = "0.1.6"
__all__ = ["__version__"]