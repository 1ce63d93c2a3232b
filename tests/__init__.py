"""
Test suite for the pagequill package.
"""
