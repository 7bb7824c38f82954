"""
URL mappings for the hospital records API.

Trailing slashes are omitted on every API path.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, refresh_view, status_view
from .views import (
    appointments,
    conditions,
    dashboard,
    doctors,
    health,
    medical_history,
    medications,
    patient_conditions,
    patient_medications,
    patients,
    roles,
    users,
)

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Authentication
    path('api/auth/login', login_view),
    path('api/auth/refresh', refresh_view),
    path('api/auth/logout', logout_view),
    path('api/auth/status', status_view),

    # Administration
    path('api/admin/dashboard', dashboard.admin_dashboard),
    path('api/users', users.users),
    path('api/users/<int:user_id>', users.user_detail),
    path('api/roles', roles.roles),
    path('api/roles/<int:role_id>', roles.role_detail),

    # Doctors
    path('api/doctors', doctors.doctors),
    path('api/doctors/<int:doctor_id>', doctors.doctor_detail),

    # Patients
    path('api/patients', patients.patients),
    path('api/patients/by-user/<int:user_id>', patients.patient_by_user),
    path('api/patients/<int:pk>', patients.patient_detail),

    # Appointments
    path('api/appointments', appointments.appointments),
    path('api/appointments/patients', appointments.appointment_patient_options),
    path('api/appointments/doctors', appointments.appointment_doctor_options),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail),

    # Catalogues
    path('api/conditions', conditions.conditions),
    path('api/conditions/<int:condition_id>', conditions.condition_detail),
    path('api/medications', medications.medications),
    path('api/medications/options', medications.medication_options),
    path('api/medications/<int:medication_id>', medications.medication_detail),

    # Patient conditions
    path('api/patients-with-conditions', patient_conditions.patients_with_conditions),
    path('api/patient-conditions', patient_conditions.create_patient_condition),
    path('api/patient-conditions/patient-options', patient_conditions.patient_options),
    path('api/patient-conditions/options', patient_conditions.condition_options),
    path('api/patient-conditions/doctors/options', patient_conditions.doctor_options),
    path('api/patient-conditions/<int:patient_id>/<int:condition_id>', patient_conditions.patient_condition_detail),

    # Patient medications
    path('api/patient-medications', patient_medications.patient_medications),
    path('api/patient-medications/doctors', patient_medications.prescriber_options),
    path('api/patient-medications/medications', patient_medications.medication_options),
    path('api/patient-medications/patients', patient_medications.patient_options),
    path('api/patient-medications/<int:patient_id>/<int:medication_id>', patient_medications.patient_medication_detail),

    # Medical history
    path('api/medical-history', medical_history.medical_history),
    path('api/medical-history/patient/<int:patient_id>', medical_history.patient_medical_history),
]
