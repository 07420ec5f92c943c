"""
Answer generation.
"""
