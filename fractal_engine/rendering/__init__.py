"""Coloring, drawing and image export."""
