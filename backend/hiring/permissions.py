from rest_framework import permissions

from hiring.signals import ensure_account


class HasRole(permissions.BasePermission):
    """
    Allow access only to authenticated users whose account has ``role``.
    """
    role = None
    message = 'This action is not available for your account role.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return ensure_account(request.user).role == self.role


class IsRecruiter(HasRole):
    role = 'recruiter'
    message = 'Only recruiters can perform this action.'
