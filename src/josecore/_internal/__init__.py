"""Private josecore modules."""
