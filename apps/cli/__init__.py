"""
WikiSense command-line interface.
"""
