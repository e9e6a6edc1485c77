"""
Cross-cutting infrastructure for forklift: logging, errors, retries and
rate-limit tracking.
"""
