"""Local storage."""
