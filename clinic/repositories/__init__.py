from .admin import AdminRepository
from .doctor import DoctorRepository
from .patient import PatientRepository
from .appointment import AppointmentRepository
from .prescription import PrescriptionRepository

__all__ = [
    "AdminRepository",
    "DoctorRepository",
    "PatientRepository",
    "AppointmentRepository",
    "PrescriptionRepository",
]
