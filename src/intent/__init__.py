"""Intent resolution and plan validation.

The intent layer converts a Spanish chat message into a strict `QueryPlan`, which the matching
engine then turns into ranked listings.
"""
