"""
Candidate data standardization.

Pure functions applied to already-validated profile data before it is stored:

- Names: title case per word ("john doe" -> "John Doe")
- Emails: trimmed and lowercased
- Phone: "(XXX) XXX-XXXX", "+1-XXX-XXX-XXXX" or "+<cc>-XXX-XXX-XXXX"
- Skills: lowercased, deduplicated, blanks dropped
- URLs: https:// added when no scheme is present, invalid URLs become ""
- Dates: experience and certification dates reduced to YYYY-MM

Running ``normalize_candidate_data`` on its own output returns the same data.
"""
import math
import re
from datetime import date, datetime, timezone as dt_timezone

from dateutil import parser as date_parser
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator

URL_FIELDS = (
    'resume_url',
    'linkedin_url',
    'github_url',
    'portfolio_url',
    'website_url',
    'twitter_url',
    'mastodon_url',
    'dribbble_url',
    'leetcode_url',
    'codeforces_url',
    'hackerrank_url',
)

TEXT_FIELDS = (
    'education',
    'major',
    'school',
    'degree_level',
    'location',
    'timezone',
    'work_authorization',
    'pronouns',
    'referral_source',
)

EEO_FIELDS = (
    'eeo_gender',
    'eeo_race_ethnicity',
    'eeo_veteran_status',
    'eeo_disability_status',
)

STRING_LIST_FIELDS = ('employment_types', 'languages', 'frameworks')

BOOLEAN_FIELDS = ('requires_sponsorship', 'open_to_relocation', 'eeo_prefer_not_to_say')

TRUE_STRINGS = {'true', '1', 'yes', 'on'}
FALSE_STRINGS = {'false', '0', 'no', 'off'}

# Month and year are taken from the parsed value; missing parts fall back to these
_DATE_DEFAULT = datetime(2000, 1, 1)
# Fragments such as "15" or "June" carry no year and are rejected
_YEAR_PATTERN = re.compile(r'\d{4}')

_url_validator = URLValidator(schemes=['http', 'https'])


def normalize_name(name) -> str:
    if not name or not isinstance(name, str):
        return ''
    words = name.strip().lower().split(' ')
    return ' '.join(w[:1].upper() + w[1:] for w in words)


def normalize_email(email) -> str:
    if not email or not isinstance(email, str):
        return ''
    return email.strip().lower()


def normalize_phone(phone) -> str:
    """Format a phone number by digit count; unrecognized shapes come back trimmed."""
    if not phone or not isinstance(phone, str):
        return ''

    digits = re.sub(r'\D', '', phone)

    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith('1'):
        return f"+1-{digits[1:4]}-{digits[4:7]}-{digits[7:]}"
    if len(digits) > 11:
        country_code, number = digits[:-10], digits[-10:]
        return f"+{country_code}-{number[:3]}-{number[3:6]}-{number[6:]}"

    return phone.strip()


def normalize_skills(skills) -> list:
    if not isinstance(skills, (list, tuple)):
        return []
    cleaned = [s.strip().lower() for s in skills if isinstance(s, str) and s.strip()]
    return list(dict.fromkeys(cleaned))


def normalize_string_list(values) -> list:
    """Trim, drop blanks and deduplicate keeping first occurrences."""
    if not isinstance(values, (list, tuple)):
        return []
    cleaned = [v.strip() for v in values if isinstance(v, str) and v.strip()]
    return list(dict.fromkeys(cleaned))


def normalize_url(url) -> str:
    """Return the URL with an http(s) scheme, or ``''`` when it does not validate.

    Existing ``http://`` URLs are kept as they are.
    """
    if not url or not isinstance(url, str):
        return ''
    trimmed = url.strip()
    if not trimmed:
        return ''

    if not trimmed.startswith(('http://', 'https://')):
        trimmed = f"https://{trimmed}"
    try:
        _url_validator(trimmed)
    except DjangoValidationError:
        return ''
    return trimmed


def _parse(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if not _YEAR_PATTERN.search(text):
        return None
    try:
        return date_parser.parse(text, default=_DATE_DEFAULT)
    except (ValueError, OverflowError):
        return None


def normalize_date(value) -> str:
    """Reduce any parseable date to ``YYYY-MM``; unparseable input gives ``''``."""
    parsed = _parse(value)
    if parsed is None:
        return ''
    return f"{parsed.year:04d}-{parsed.month:02d}"


def _to_month_or_none(value):
    if value is None or value == '':
        return None
    return normalize_date(value) or None


def _clean_text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def normalize_experience(entries) -> list:
    """Normalize work history, dropping entries without company, title or start date."""
    if not isinstance(entries, (list, tuple)):
        return []
    result = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        item = {
            'company': _clean_text(entry.get('company')),
            'title': _clean_text(entry.get('title')),
            'start_date': _to_month_or_none(entry.get('start_date')) or '',
            'end_date': _to_month_or_none(entry.get('end_date')),
            'description': _clean_text(entry.get('description')),
        }
        if item['company'] and item['title'] and item['start_date']:
            result.append(item)
    return result


def normalize_certifications(entries) -> list:
    if not isinstance(entries, (list, tuple)):
        return []
    result = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        item = {
            'name': _clean_text(entry.get('name')),
            'issuer': _clean_text(entry.get('issuer')),
            'date': _to_month_or_none(entry.get('date')) or '',
            'expiry': _to_month_or_none(entry.get('expiry')),
        }
        if item['name'] and item['issuer'] and item['date']:
            result.append(item)
    return result


def normalize_offer_deadline(value):
    """Re-emit a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC, or None."""
    parsed = _parse(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    parsed = parsed.astimezone(dt_timezone.utc)
    return parsed.strftime('%Y-%m-%dT%H:%M:%S.') + f"{parsed.microsecond // 1000:03d}Z"


def normalize_graduation_date(value):
    parsed = _parse(value)
    if parsed is None:
        return None
    return parsed.date().isoformat()


def normalize_gpa(value):
    number = _to_float(value)
    if number is None:
        return None
    return min(4.0, max(0.0, round(number, 2)))


def normalize_years_of_experience(value):
    number = _to_float(value)
    if number is None:
        return None
    return max(0, math.floor(number + 0.5))


def _to_float(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    return None


def trim_or_none(value):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_candidate_data(data: dict) -> dict:
    """Normalize every recognised key present in ``data``.

    Keys that are absent stay absent so partial updates only touch what the
    caller sent. ``user_id`` and unknown keys are passed through unchanged.
    """
    normalized = dict(data)

    if 'name' in data:
        normalized['name'] = normalize_name(data['name'])
    if 'email' in data:
        normalized['email'] = normalize_email(data['email'])
    if 'phone' in data:
        normalized['phone'] = normalize_phone(data['phone']) or None

    for field in URL_FIELDS:
        if field in data:
            normalized[field] = normalize_url(data[field]) or None

    if 'skills' in data:
        normalized['skills'] = normalize_skills(data['skills'])
    if 'experience' in data:
        normalized['experience'] = normalize_experience(data['experience'])
    if 'certifications' in data:
        normalized['certifications'] = normalize_certifications(data['certifications'])
    for field in STRING_LIST_FIELDS:
        if field in data:
            normalized[field] = normalize_string_list(data[field])

    for field in TEXT_FIELDS + EEO_FIELDS:
        if field in data:
            normalized[field] = trim_or_none(data[field])

    if 'graduation_date' in data:
        normalized['graduation_date'] = normalize_graduation_date(data['graduation_date'])
    if 'offer_deadline' in data:
        normalized['offer_deadline'] = normalize_offer_deadline(data['offer_deadline'])
    if 'gpa' in data:
        normalized['gpa'] = normalize_gpa(data['gpa'])
    if 'years_of_experience' in data:
        normalized['years_of_experience'] = normalize_years_of_experience(data['years_of_experience'])

    for field in BOOLEAN_FIELDS:
        if field in data:
            normalized[field] = normalize_bool(data[field])

    if normalized.get('eeo_prefer_not_to_say') is True:
        for field in EEO_FIELDS:
            normalized[field] = None

    return normalized
