"""
Utility modules and functions
"""
