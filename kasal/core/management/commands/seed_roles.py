from django.core.management.base import BaseCommand

from kasal.core.models import Permission, Role
from kasal.core.permissions import PERMISSION_CATALOGUE


class Command(BaseCommand):
    help = 'Create the permission catalogue and the default Admin and Staff roles'

    def handle(self, *args, **options):
        roles_config = [
            {
                'name': 'Admin',
                'description': 'Shop owners - full access including user management',
                'permissions': '*',
            },
            {
                'name': 'Staff',
                'description': 'Counter staff - rentals, reservations and appointments',
                'permissions': [
                    'manage_rentals',
                    'manage_reservations',
                    'manage_appointments',
                    'manage_damaged_items',
                    'view_dashboard',
                ],
            },
        ]

        for code, description in PERMISSION_CATALOGUE:
            _, created = Permission.objects.update_or_create(code=code, defaults={'description': description})
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created permission: {code}'))

        for role_config in roles_config:
            role, created = Role.objects.get_or_create(
                name=role_config['name'],
                defaults={'description': role_config['description']}
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created role: {role.name}'))
            else:
                self.stdout.write(f'  Role already exists: {role.name}')

            if role_config['permissions'] == '*':
                role.permissions.set(Permission.objects.all())
            else:
                role.permissions.set(Permission.objects.filter(code__in=role_config['permissions']))
            self.stdout.write(f'  {role.name}: {role.permissions.count()} permission(s)')

        self.stdout.write(self.style.SUCCESS('Roles seeded.'))
