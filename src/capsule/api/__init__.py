"""
HTTP API for the capsule backend.
"""
