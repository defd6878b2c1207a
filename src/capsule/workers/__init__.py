"""
Background workers.
"""
