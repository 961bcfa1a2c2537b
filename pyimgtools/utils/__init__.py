"""
Utilities shared by all parts of *pyimgtools*.
"""
__title__ = "Utilities"
