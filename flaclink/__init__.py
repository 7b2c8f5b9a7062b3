# flaclink
# Hardlink newly downloaded FLAC albums into a music library, once.

__version__ = "0.2.0"
