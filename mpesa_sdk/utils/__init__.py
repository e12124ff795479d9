"""
Utility helpers for the M-Pesa SDK.
"""
