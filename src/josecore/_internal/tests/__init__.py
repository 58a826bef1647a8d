"""josecore tests."""
