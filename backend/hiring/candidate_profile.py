"""
Candidate profile persistence.

Every write goes validate -> normalize -> store, so only normalized data ever
reaches the ``CandidateProfile`` table.
"""
import logging

from django.db import DatabaseError, IntegrityError, transaction

from hiring.exceptions import ConflictError, NotFoundError, StorageError
from hiring.models import CandidateProfile
from hiring.normalization import normalize_candidate_data
from hiring.serializers import validate_candidate_profile_insert, validate_candidate_profile_update

logger = logging.getLogger(__name__)

# Keys accepted by validation that are not model columns
_NON_MODEL_KEYS = {'user_id'}


def _model_fields(data):
    return {k: v for k, v in data.items() if k not in _NON_MODEL_KEYS}


def _write(profile, data, created):
    try:
        with transaction.atomic():
            for attr, value in _model_fields(data).items():
                setattr(profile, attr, value)
            profile.save()
    except IntegrityError as e:
        logger.warning(f"Candidate profile conflict for account {profile.account_id}: {e}")
        raise ConflictError('A profile with this email already exists.', code='profile_conflict')
    except DatabaseError as e:
        logger.error(f"Failed to store candidate profile for account {profile.account_id}: {e}", exc_info=True)
        raise StorageError()

    profile.refresh_from_db()
    logger.info(f"Candidate profile {'created' if created else 'updated'} for account {profile.account_id}")
    return profile


def save_candidate_profile(account, payload):
    """Create the profile for ``account`` from a complete onboarding payload.

    The payload's ``user_id`` is always the account id; any other value is
    overwritten before validation.
    """
    if CandidateProfile.objects.filter(account=account).exists():
        raise ConflictError('A candidate profile already exists for this account.', code='profile_exists')

    validated = validate_candidate_profile_insert({**payload, 'user_id': str(account.id)})
    normalized = normalize_candidate_data(validated)
    return _write(CandidateProfile(account=account), normalized, created=True)


def update_candidate_profile(account, payload):
    """Apply a partial update; only the keys present in ``payload`` change."""
    profile = fetch_candidate_profile(account)
    if profile is None:
        raise NotFoundError('Candidate profile not found.', code='profile_not_found')

    body = {k: v for k, v in payload.items() if k != 'user_id'}
    validated = validate_candidate_profile_update(body)
    normalized = normalize_candidate_data(validated)
    return _write(profile, normalized, created=False)


def upsert_candidate_profile(account, payload):
    """Update the existing profile, or create it when the account has none.

    Returns ``(profile, created)``.
    """
    if fetch_candidate_profile(account) is None:
        return save_candidate_profile(account, payload), True
    return update_candidate_profile(account, payload), False


def fetch_candidate_profile(account):
    try:
        return CandidateProfile.objects.filter(account=account).first()
    except DatabaseError as e:
        logger.error(f"Failed to load candidate profile for account {account.id}: {e}", exc_info=True)
        raise StorageError()
