"""Plotly HTML export for shift panels."""
