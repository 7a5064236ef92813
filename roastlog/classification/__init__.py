"""Content classification for logged values."""
