"""Benchmark engine for ratebench.

Calibrates a batch size per callable, times batches until the relative
error of the mean converges (or a time ceiling is hit), and ranks the
results against the fastest callable.
"""
