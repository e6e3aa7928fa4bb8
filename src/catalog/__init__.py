"""Property catalog: typed listing records and the in-memory store they live in.

Records are built once per load from a normalized CSV export and are never mutated afterwards;
a reload swaps the whole catalog.
"""
