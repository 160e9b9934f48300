from rest_framework.permissions import BasePermission, SAFE_METHODS

# Permission catalogue seeded by the seed_roles command
PERMISSION_CATALOGUE = [
    ('manage_users', 'Create, edit and remove staff accounts and roles'),
    ('manage_inventory', 'Edit items, packages and measurement references'),
    ('manage_rentals', 'Create and process rentals'),
    ('manage_reservations', 'Confirm, reschedule and cancel reservations'),
    ('manage_appointments', 'Manage tailoring appointments and shop unavailability'),
    ('manage_damaged_items', 'Track repair status of damaged items'),
    ('manage_settings', 'Edit shop settings'),
    ('manage_content', 'Edit storefront content'),
    ('view_dashboard', 'View dashboard statistics'),
    ('view_audit_logs', 'View audit history'),
]


class HasRolePermission(BasePermission):
    """Grants access when the user's role carries the view's permission code"""
    required_permission = None
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return user.has_role_permission(self.required_permission)


def role_permission(code):
    """Build a permission class requiring ``code``: @permission_classes([IsAuthenticated, role_permission('manage_rentals')])"""
    return type(f'Requires_{code}', (HasRolePermission,), {'required_permission': code})


class PublicReadRolePermission(HasRolePermission):
    """Anyone may read; writes need the role permission"""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)


def public_read(code):
    return type(f'PublicReadRequires_{code}', (PublicReadRolePermission,), {'required_permission': code})


class PublicCreateRolePermission(HasRolePermission):
    """Anyone may submit (storefront bookings); everything else needs the role permission"""

    def has_permission(self, request, view):
        if request.method == 'POST':
            return True
        return super().has_permission(request, view)


def public_create(code):
    return type(f'PublicCreateRequires_{code}', (PublicCreateRolePermission,), {'required_permission': code})
