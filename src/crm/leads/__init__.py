"""Lead management -- prospects, their communication log and conversion to clients."""
