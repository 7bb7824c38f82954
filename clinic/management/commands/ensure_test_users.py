# clinic/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Doctor, Patient, Role, User

ROLES = [
    ("Administrador", "Administración del sistema"),
    ("Médico", "Personal médico"),
    ("Paciente", "Paciente registrado"),
]

TEST_SET = [
    ("admin1", "admin1@hospital.local", "Administrador"),
    ("dr.jones", "dr.jones@hospital.local", "Médico"),
    ("patient1", "patient1@hospital.local", "Paciente"),
]


class Command(BaseCommand):
    help = "Ensure the three roles and one test user per role exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456", help="password set on every test user")

    @transaction.atomic
    def handle(self, *args, **opts):
        password = opts["password"]
        roles = {}
        for name, description in ROLES:
            roles[name], _ = Role.objects.get_or_create(name=name, defaults={"description": description})

        for username, email, role_name in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"email": email, "role": roles[role_name], "is_active": True},
            )
            # force password, role and active flag back to known values
            u.set_password(password)
            u.role = roles[role_name]
            u.is_active = True
            u.save(update_fields=["password", "role", "is_active"])
            if role_name == "Médico":
                Doctor.objects.get_or_create(user=u, defaults={"specialty": "Medicina general"})
            elif role_name == "Paciente":
                Patient.objects.get_or_create(user=u, defaults={"identification_number": "TEST-0001"})
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {username} ({role_name})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
