"""
Serializers for candidate profiles, recruiter profiles, jobs and applications.

The candidate profile input serializers only check shape; reformatting is left
to ``hiring.normalization`` so that both layers can be tested on their own.
"""
from dataclasses import dataclass, field
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import RegexValidator, URLValidator
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from hiring.application_workflow import to_external_status
from hiring.deadlines import deadline_status, deadline_text
from hiring.exceptions import InputValidationError
from hiring.models import Application, CandidateProfile, Job, RecruiterProfile, UserAccount


PHONE_PATTERN = r'^[\+]?[1-9][\d]{0,15}$|^[\+]?[(]?[\d\s\-\(\)]{10,}$|^$'
MONTH_PATTERN = r'^\d{4}-\d{2}$'

RESUME_URL_EXTENSIONS = ('.pdf', '.doc', '.docx', '.txt', '.rtf')
RESUME_URL_STORAGE_HOSTS = (
    'firebasestorage.googleapis.com',
    'storage.googleapis.com',
    's3.amazonaws.com',
    'blob.core.windows.net',
)

month_validator = RegexValidator(MONTH_PATTERN, message='Date must be in YYYY-MM format.')


class HttpUrlField(serializers.CharField):
    """Optional URL that must use http or https when it is not blank."""

    default_error_messages = {
        'invalid_url': 'Enter a valid URL starting with http:// or https://.',
    }

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_blank', True)
        kwargs.setdefault('allow_null', True)
        kwargs.setdefault('max_length', 500)
        super().__init__(**kwargs)
        self._url_validator = URLValidator(schemes=['http', 'https'])

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if value:
            try:
                self._url_validator(value)
            except DjangoValidationError:
                self.fail('invalid_url')
        return value


class LooseBooleanField(serializers.Field):
    """Accepts a boolean or a string; interpretation happens during normalization."""

    default_error_messages = {'invalid': 'Must be a boolean or a string.'}

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, (bool, str)):
            return data
        self.fail('invalid')

    def to_representation(self, value):
        return value


def _optional_text(max_length):
    return serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=max_length)


def _string_list(max_length=100):
    return serializers.ListField(
        child=serializers.CharField(max_length=max_length, allow_blank=True),
        required=False,
    )


class WorkExperienceEntrySerializer(serializers.Serializer):
    company = serializers.CharField(max_length=100)
    title = serializers.CharField(max_length=100)
    start_date = serializers.CharField(validators=[month_validator])
    end_date = serializers.CharField(validators=[month_validator], allow_null=True, required=False, default=None)
    description = serializers.CharField(max_length=1000, allow_blank=True, required=False, default='')


class CertificationEntrySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    issuer = serializers.CharField(max_length=100)
    date = serializers.CharField(validators=[month_validator])
    expiry = serializers.CharField(validators=[month_validator], allow_null=True, required=False, default=None)


class EntryListField(serializers.ListField):
    """List of structured entries, each checked with the full entry serializer.

    A partial parent serializer still requires every field inside an entry.
    """

    def __init__(self, entry_serializer, **kwargs):
        self.entry_serializer = entry_serializer
        kwargs.setdefault('child', serializers.DictField())
        super().__init__(**kwargs)

    def run_child_validation(self, data):
        result = []
        errors = {}
        for index, item in enumerate(data):
            entry = self.entry_serializer(data=item)
            if entry.is_valid():
                result.append(dict(entry.validated_data))
            else:
                errors[index] = entry.errors
        if errors:
            raise serializers.ValidationError(errors)
        return result


class CandidateProfileInsertSerializer(serializers.Serializer):
    """Schema for a complete candidate profile submitted during onboarding."""
    user_id = serializers.UUIDField()
    name = serializers.CharField(min_length=1, max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=32,
        validators=[RegexValidator(PHONE_PATTERN, message='Invalid phone number format.')],
    )

    education = _optional_text(200)
    major = _optional_text(200)
    school = _optional_text(200)
    degree_level = _optional_text(100)
    graduation_date = serializers.DateField(required=False, allow_null=True)
    gpa = serializers.FloatField(required=False, allow_null=True, min_value=0.0, max_value=4.0)
    years_of_experience = serializers.IntegerField(required=False, allow_null=True, min_value=0)

    resume_url = HttpUrlField()
    skills = serializers.ListField(
        child=serializers.CharField(max_length=50, allow_blank=True),
        required=False,
        max_length=50,
    )
    experience = EntryListField(WorkExperienceEntrySerializer, required=False, max_length=20)
    certifications = EntryListField(CertificationEntrySerializer, required=False, max_length=20)

    linkedin_url = HttpUrlField()
    github_url = HttpUrlField()
    portfolio_url = HttpUrlField()
    website_url = HttpUrlField()
    twitter_url = HttpUrlField()
    mastodon_url = HttpUrlField()
    dribbble_url = HttpUrlField()
    leetcode_url = HttpUrlField()
    codeforces_url = HttpUrlField()
    hackerrank_url = HttpUrlField()

    location = _optional_text(160)
    timezone = _optional_text(64)
    work_authorization = _optional_text(120)
    requires_sponsorship = LooseBooleanField()
    open_to_relocation = LooseBooleanField()
    employment_types = _string_list()
    languages = _string_list()
    frameworks = _string_list()
    pronouns = _optional_text(50)
    referral_source = _optional_text(120)
    offer_deadline = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    eeo_gender = _optional_text(100)
    eeo_race_ethnicity = _optional_text(100)
    eeo_veteran_status = _optional_text(100)
    eeo_disability_status = _optional_text(100)
    eeo_prefer_not_to_say = LooseBooleanField()

    def validate_offer_deadline(self, value):
        if not value:
            return value
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise serializers.ValidationError('Offer deadline must be an ISO-8601 datetime.')
        return value


class CandidateProfileUpdateSerializer(CandidateProfileInsertSerializer):
    """Same rules as insert; used with ``partial=True`` so every field is optional."""
    user_id = None


@dataclass
class ValidationResult:
    success: bool
    data: Optional[dict] = None
    errors: dict = field(default_factory=dict)


def flatten_errors(errors, prefix=''):
    """Flatten nested DRF errors into ``{'experience.1.company': [...]}``."""
    flat = {}
    if isinstance(errors, dict):
        for key, value in errors.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            flat.update(flatten_errors(value, path))
    elif isinstance(errors, (list, tuple)):
        if all(not isinstance(e, (dict, list, tuple)) for e in errors):
            flat[prefix or 'non_field_errors'] = [str(e) for e in errors]
        else:
            for index, value in enumerate(errors):
                if value:
                    flat.update(flatten_errors(value, f"{prefix}.{index}" if prefix else str(index)))
    else:
        flat[prefix or 'non_field_errors'] = [str(errors)]
    return flat


def _to_plain(value):
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


def _run(serializer):
    if not serializer.is_valid():
        raise InputValidationError(flatten_errors(serializer.errors))
    data = _to_plain(dict(serializer.validated_data))
    if data.get('user_id') is not None:
        data['user_id'] = str(data['user_id'])
    return data


def validate_candidate_profile_insert(payload) -> dict:
    """Return validated insert data or raise ``InputValidationError`` listing every bad field."""
    return _run(CandidateProfileInsertSerializer(data=payload))


def validate_candidate_profile_update(payload) -> dict:
    return _run(CandidateProfileUpdateSerializer(data=payload, partial=True))


def safe_validate_candidate_profile_insert(payload) -> ValidationResult:
    try:
        return ValidationResult(success=True, data=validate_candidate_profile_insert(payload))
    except InputValidationError as exc:
        return ValidationResult(success=False, errors=exc.field_errors)


def safe_validate_candidate_profile_update(payload) -> ValidationResult:
    try:
        return ValidationResult(success=True, data=validate_candidate_profile_update(payload))
    except InputValidationError as exc:
        return ValidationResult(success=False, errors=exc.field_errors)


class CandidateProfileSerializer(serializers.ModelSerializer):
    """Read representation of a stored candidate profile."""
    user_id = serializers.UUIDField(source='account_id', read_only=True)

    class Meta:
        model = CandidateProfile
        exclude = ['account', 'resume_path']
        read_only_fields = ['id', 'created_at', 'updated_at']


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserAccount.ROLE_CHOICES)


class RecruiterProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(source='account_id', read_only=True)

    class Meta:
        model = RecruiterProfile
        fields = [
            'id', 'user_id', 'name', 'email', 'company_name', 'job_title',
            'company_size', 'phone', 'linkedin_url', 'company_website',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_phone(self, value):
        if value and not RegexValidator(PHONE_PATTERN).regex.match(value):
            raise serializers.ValidationError('Invalid phone number format.')
        return value


class ResumeUploadSerializer(serializers.Serializer):
    resume = serializers.FileField(required=True, help_text='Resume document (PDF, DOC or DOCX, max 5MB)')


class SupplementalQuestionSerializer(serializers.Serializer):
    QUESTION_TYPES = ['text', 'textarea', 'select']

    id = serializers.CharField()
    question = serializers.CharField()
    type = serializers.ChoiceField(choices=QUESTION_TYPES)
    options = serializers.ListField(child=serializers.CharField(), required=False)
    required = serializers.BooleanField(required=False, default=False)

    def validate(self, data):
        if data.get('type') == 'select' and not data.get('options'):
            raise serializers.ValidationError({'options': 'Select questions need at least one option.'})
        return data


class JobSerializer(serializers.ModelSerializer):
    employer_id = serializers.UUIDField(read_only=True)
    supplemental_questions = serializers.ListField(read_only=True)
    deadline_status = serializers.SerializerMethodField()
    deadline_text = serializers.SerializerMethodField()

    class Meta:
        model = Job
        fields = [
            'id', 'employer_id', 'title', 'company', 'location', 'description',
            'salary_range', 'requirements', 'supplemental_questions', 'status', 'deadline',
            'deadline_status', 'deadline_text', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'location': {'required': True, 'allow_null': False, 'allow_blank': False},
        }

    def to_internal_value(self, data):
        # Questions may also be sent at the top level as ``supplementalQuestions``
        if isinstance(data, dict) and 'supplementalQuestions' in data:
            data = dict(data)
            requirements = data.get('requirements')
            requirements = dict(requirements) if isinstance(requirements, dict) else {}
            requirements['supplementalQuestions'] = data.pop('supplementalQuestions')
            data['requirements'] = requirements
        return super().to_internal_value(data)

    def get_deadline_status(self, obj):
        return deadline_status(obj.deadline)

    def get_deadline_text(self, obj):
        return deadline_text(obj.deadline)

    def validate_requirements(self, value):
        if value is None:
            return value
        if not isinstance(value, dict):
            raise serializers.ValidationError('Requirements must be an object.')
        questions = value.get('supplementalQuestions')
        if questions is not None:
            qs = SupplementalQuestionSerializer(data=questions, many=True)
            if not qs.is_valid():
                raise serializers.ValidationError({'supplementalQuestions': qs.errors})
            value = {**value, 'supplementalQuestions': [dict(q) for q in qs.validated_data]}
        return value


class RecruiterJobSerializer(JobSerializer):
    application_count = serializers.IntegerField(read_only=True)

    class Meta(JobSerializer.Meta):
        fields = JobSerializer.Meta.fields + ['application_count']


def _is_document_url(url):
    lower = url.lower()
    return any(ext in lower for ext in RESUME_URL_EXTENSIONS) or any(host in lower for host in RESUME_URL_STORAGE_HOSTS)


def resolve_application_payload(data):
    """Collapse the accepted request shapes into one canonical mapping.

    Answers may arrive as ``supplemental_answers`` (mapping),
    ``supplementalAnswers`` (list of ``{questionId, answer}``) or
    ``details.answers``; the job may be named ``job_id`` or ``jobId``.
    """
    if not isinstance(data, dict):
        raise serializers.ValidationError({'non_field_errors': ['Invalid data. Expected an object.']})

    details = data.get('details') if isinstance(data.get('details'), dict) else {}
    resolved = {'job_id': data.get('job_id') or data.get('jobId')}

    if 'resume_url' in data:
        resolved['resume_url'] = data['resume_url']
    elif 'resumeUrl' in data:
        resolved['resume_url'] = data['resumeUrl']

    if details.get('coverLetter') is not None:
        resolved['cover_letter'] = details['coverLetter']
    elif 'cover_letter' in data:
        resolved['cover_letter'] = data['cover_letter']

    answers = None
    if isinstance(data.get('supplemental_answers'), dict):
        answers = data['supplemental_answers']
    elif isinstance(data.get('supplementalAnswers'), list):
        answers = {}
        for item in data['supplementalAnswers']:
            if isinstance(item, dict) and isinstance(item.get('questionId'), str):
                answer = item.get('answer')
                answers[item['questionId']] = '' if answer is None else str(answer).strip()
    elif isinstance(details.get('answers'), dict):
        answers = details['answers']
    if answers is not None:
        resolved['supplemental_answers'] = {str(k): '' if v is None else str(v) for k, v in answers.items()}
    return resolved


class ApplicationCreateSerializer(serializers.Serializer):
    job_id = serializers.UUIDField()
    resume_url = serializers.CharField(required=False, allow_null=True, max_length=500)
    cover_letter = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=5000, trim_whitespace=False,
        error_messages={'max_length': 'Cover letter must be less than 5000 characters.'},
    )
    supplemental_answers = serializers.DictField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False), required=False,
    )

    def to_internal_value(self, data):
        return super().to_internal_value(resolve_application_payload(data))

    def validate_resume_url(self, value):
        if value is None:
            return value
        if not value.startswith(('http://', 'https://')):
            raise serializers.ValidationError('Resume URL must be an HTTP or HTTPS URL.')
        try:
            URLValidator(schemes=['http', 'https'])(value)
        except DjangoValidationError:
            raise serializers.ValidationError('Resume URL must be a valid URL.')
        if not _is_document_url(value):
            raise serializers.ValidationError(
                'Resume URL must point to a document (.pdf, .doc, .docx, .txt, .rtf) or cloud storage.'
            )
        return value


class ApplicationStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    candidate_id = serializers.UUIDField(required=False)


class ApplicationJobSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Job
        fields = ['id', 'title', 'company', 'location', 'status', 'deadline']


class ApplicationSerializer(serializers.ModelSerializer):
    """Application as returned by the API; ``status`` uses display names."""
    job_id = serializers.UUIDField(read_only=True)
    candidate_id = serializers.UUIDField(read_only=True)
    status = serializers.SerializerMethodField()
    job = ApplicationJobSummarySerializer(read_only=True)

    class Meta:
        model = Application
        fields = [
            'id', 'job_id', 'candidate_id', 'status', 'resume_url', 'cover_letter',
            'supplemental_answers', 'applied_at', 'updated_at', 'job',
        ]

    def get_status(self, obj):
        return to_external_status(obj.status)


class RecruiterApplicationSerializer(ApplicationSerializer):
    """Adds the applicant's profile summary for the job owner's listing."""
    candidate = serializers.SerializerMethodField()

    class Meta(ApplicationSerializer.Meta):
        fields = ApplicationSerializer.Meta.fields + ['candidate']

    def get_candidate(self, obj):
        profile = getattr(obj.candidate, 'candidate_profile', None)
        if profile is None:
            return {'email': obj.candidate.email}
        return {
            'name': profile.name,
            'email': profile.email,
            'phone': profile.phone,
            'skills': profile.skills,
            'resume_url': profile.resume_url,
        }
