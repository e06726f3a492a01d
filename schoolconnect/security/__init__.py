"""Secret handling helpers."""
