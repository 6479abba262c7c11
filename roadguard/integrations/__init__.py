"""
Optional third-party integrations.
"""
