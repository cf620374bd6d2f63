"""UI-facing layer: keyboard dispatch without any toolkit dependency."""
