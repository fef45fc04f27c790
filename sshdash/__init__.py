"""sshdash - SSH connections with hostname negotiation and fallbacks."""

__version__ = "0.1.0"
