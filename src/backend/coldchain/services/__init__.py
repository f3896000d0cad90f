"""Correlation, downsampling and export services."""
