# a1_core/patients/models.py
from django.db import models

from a1_core.common.models import UUIDModel


class Patient(UUIDModel):
    """
    Patients are shared across the network. They carry no establishment of
    their own; attendances link them to establishments.
    """

    full_name = models.CharField(max_length=255)
    # CPF, digits only
    document = models.CharField(max_length=11, unique=True, null=True, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["full_name"], name="patients_full_name_idx"),
        ]

    def __str__(self) -> str:
        return self.full_name
