"""ripit - download audio and split it into tracks."""

__version__ = "0.1.0"
