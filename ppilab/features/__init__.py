"""Feature slices of the PPILab service."""
