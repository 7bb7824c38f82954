"""Clinical records application for the hospital backend.

This package contains models, serializers, views and route registrations
for users and roles, doctors, patients, appointments, the condition and
medication catalogues and the patient medical history.
"""
