import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from hiring.models import UserAccount

logger = logging.getLogger(__name__)


def account_email_for(user):
    """Lowercased email for the user's account; users without one get a per-UID placeholder."""
    email = (getattr(user, 'email', '') or '').strip().lower()
    return email or f"{user.username}@users.invalid"


def ensure_account(user):
    """Return the user's ``UserAccount``, creating it if needed."""
    try:
        return user.account
    except UserAccount.DoesNotExist:
        pass
    account, _ = UserAccount.objects.get_or_create(user=user, defaults={'email': account_email_for(user)})
    user.account = account
    return account


@receiver(post_save, sender=get_user_model())
def ensure_useraccount_exists(sender, instance, created, **kwargs):
    """Ensure a UserAccount record exists for every Django User."""
    try:
        with transaction.atomic():
            if created:
                ensure_account(instance)
                return
            # Keep email in sync (lowercased)
            acc = UserAccount.objects.filter(user=instance).first()
            email = account_email_for(instance)
            if acc and acc.email != email:
                acc.email = email
                acc.save(update_fields=['email', 'updated_at'])
    except DatabaseError as e:
        # Authentication retries through ensure_account on the next request
        logger.warning(f"Could not sync UserAccount for user {instance.pk}: {e}")
