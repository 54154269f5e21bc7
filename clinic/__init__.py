"""
Clinic Appointment Backend

A FastAPI-based backend for a single clinic: admins, doctors, patients,
appointments and prescriptions behind role-scoped authentication tokens.
"""

__version__ = "1.0.0"
