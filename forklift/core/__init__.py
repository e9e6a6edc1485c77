"""
Core pipeline of forklift: URL parsing, paginated fetching and filtering.
"""
