"""
HTTP service for generator sessions.
"""
