"""Issue tracker integration."""
