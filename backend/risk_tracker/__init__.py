"""
Diabetes Risk Tracker backend.
"""
