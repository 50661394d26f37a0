"""
Garage Service Manager backend.
"""
