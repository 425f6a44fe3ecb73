"""
Guest Check-In Service
Guest list, QR scan check-in, staff approval and face-verified admin login.
"""

__version__ = "1.0.0"
