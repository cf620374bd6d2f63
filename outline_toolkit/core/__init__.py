"""GUI-agnostic core: the node forest, buffer state and editing services."""
