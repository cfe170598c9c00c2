"""
Appointment slot availability and booking for telemedicine professionals.
"""

__version__ = "0.1.0"
