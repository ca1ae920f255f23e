"""
Word of the Day service package.
"""
