"""pkgconverge — converge a single native package to its declared state."""

__version__ = "0.1.0"
