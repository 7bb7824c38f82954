"""
Database models for the hospital records backend.

These models capture the clinical records managed by the system:
users and their roles, patient and doctor profiles, appointments,
the condition and medication catalogues and the association rows
linking patients to them.  Table names follow the existing relational
schema so the application can run against a database populated by
the legacy tooling.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(models.Model):
    """A named role such as ``Administrador``, ``Médico`` or ``Paciente``.

    The stored name is free text; :mod:`clinic.roles` translates it to one
    of the canonical values used for access control.
    """
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'rol'
        ordering = ['id']

    def __str__(self) -> str:
        return self.name


class User(AbstractUser):
    """Application user.

    ``username`` is the display/login name.  The role is a reference to a
    :class:`Role` row so administrators can rename roles without touching
    user rows.
    """
    email = models.EmailField(unique=True)
    role = models.ForeignKey(
        Role, null=True, blank=True, on_delete=models.PROTECT, related_name='users', db_index=True
    )

    class Meta:
        db_table = 'usuario'

    def __str__(self) -> str:
        return f"{self.username} ({self.role.name if self.role else '-'})"


class Patient(models.Model):
    """Patient profile attached to a user with the patient role."""
    GENDER_CHOICES = [
        ('male', 'Masculino'),
        ('female', 'Femenino'),
        ('other', 'Otro'),
        ('unknown', 'Desconocido'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient')
    identification_number = models.CharField(max_length=30, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=255, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    # Identifier of the mirrored FHIR Patient resource, when the sync succeeded
    fhir_id = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        db_table = 'paciente'

    def __str__(self) -> str:
        return f"{self.user.username} ({self.identification_number})"


class Doctor(models.Model):
    """Doctor profile attached to a user with the physician role."""
    user = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='doctor'
    )
    specialty = models.CharField(max_length=100)
    fhir_id = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        db_table = 'medico'

    def __str__(self) -> str:
        name = self.user.username if self.user else f"#{self.pk}"
        return f"{name} ({self.specialty})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Programada'),
        (STATUS_COMPLETED, 'Completada'),
        (STATUS_CANCELLED, 'Cancelada'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    scheduled_at = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)

    class Meta:
        db_table = 'cita'
        indexes = [
            models.Index(fields=['patient', 'scheduled_at'], name='cita_patient_6a1f2c_idx'),
        ]

    def __str__(self) -> str:
        return f"Appointment {self.pk} p={self.patient_id} d={self.doctor_id} @ {self.scheduled_at:%F %T}"


class MedicalCondition(models.Model):
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)

    class Meta:
        db_table = 'condicion_medica'

    def __str__(self) -> str:
        return self.name


class PatientCondition(models.Model):
    """Diagnosis of a condition for a patient, optionally by a doctor."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='conditions')
    condition = models.ForeignKey(MedicalCondition, on_delete=models.CASCADE, related_name='patients')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='diagnoses')
    diagnosed_on = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'paciente_condicion_medica'
        constraints = [
            models.UniqueConstraint(fields=['patient', 'condition'], name='uniq_patient_condition'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} has {self.condition_id}"


class Medication(models.Model):
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)

    class Meta:
        db_table = 'medicamento'

    def __str__(self) -> str:
        return self.name


class PatientMedication(models.Model):
    """Prescription of a medication to a patient by a doctor."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medications')
    medication = models.ForeignKey(Medication, on_delete=models.CASCADE, related_name='patients')
    doctor = models.ForeignKey(Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions')
    prescribed_on = models.DateField(null=True, blank=True)
    dosage = models.CharField(max_length=100, blank=True)
    frequency = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'paciente_medicamento'
        constraints = [
            models.UniqueConstraint(fields=['patient', 'medication'], name='uniq_patient_medication'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} takes {self.medication_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audi_action_3c9e1d_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audi_object__8b2f4a_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
