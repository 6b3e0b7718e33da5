"""Interactive git-flow workflows."""
