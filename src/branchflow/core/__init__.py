"""Repository primitives: shell, branches, git, setup."""
