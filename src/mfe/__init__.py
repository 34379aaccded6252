"""Segment-level football match engine driven by externally supplied randomness."""
