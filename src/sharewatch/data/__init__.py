"""Data layer - schemas shared across components."""
