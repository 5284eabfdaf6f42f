"""
Core utilities shared by every dsci-ml module: exception types.
"""
