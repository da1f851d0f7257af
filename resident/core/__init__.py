"""
Core primitives shared across the quiz pipeline.
"""
