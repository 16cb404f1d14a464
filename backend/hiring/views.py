"""
API views for candidate profiles, recruiter profiles, jobs and applications.
"""
import logging
from collections.abc import Mapping

from django.db import DatabaseError, IntegrityError, connection
from django.db.models import Count, Q
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from hiring.application_workflow import ApplicationWorkflow
from hiring.candidate_profile import fetch_candidate_profile, upsert_candidate_profile
from hiring.deadlines import DEADLINE_FILTERS, filter_jobs_by_deadline, sort_jobs_by_deadline
from hiring.exceptions import AuthorizationError, ConflictError, NotFoundError
from hiring.models import Application, Job, RecruiterProfile
from hiring.normalization import STRING_LIST_FIELDS
from hiring.permissions import IsRecruiter
from hiring.serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    ApplicationStatusSerializer,
    CandidateProfileSerializer,
    JobSerializer,
    RecruiterApplicationSerializer,
    RecruiterJobSerializer,
    RecruiterProfileSerializer,
    ResumeUploadSerializer,
    RoleSerializer,
)
from hiring.signals import ensure_account
from hiring.storage_utils import delete_resume_file, save_resume_file, validate_resume_file

logger = logging.getLogger(__name__)

_LIST_FIELDS = ('skills',) + STRING_LIST_FIELDS


def _validation_messages(errors) -> list[str]:
    """Return a list of human-readable validation error messages.

    Example input:
      {"company_name": ["This field is required."], "phone": ["Invalid phone number format."]}
    Output list:
      ["Company name: This field is required.", "Phone: Invalid phone number format."]
    """
    messages = []
    if isinstance(errors, dict):
        for field, err in errors.items():
            if isinstance(err, (list, tuple)) and err:
                msg = str(err[0])
            elif isinstance(err, dict):
                nested = _validation_messages(err)
                msg = nested[0] if nested else 'Invalid value'
            else:
                msg = str(err)
            if field == 'non_field_errors':
                messages.append(msg)
            else:
                field_label = str(field).replace('_', ' ').capitalize()
                messages.append(f"{field_label}: {msg}")
    elif isinstance(errors, (list, tuple)):
        messages.extend(str(e) for e in errors if e)
    return messages


def _validation_error_response(errors):
    msgs = _validation_messages(errors)
    return Response(
        {
            'error': {
                'code': 'validation_error',
                'message': (msgs[0] if msgs else 'Validation error'),
                'messages': msgs,
                'details': errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _payload(request):
    """Request body as a plain dict, or None when the body is not an object.

    Form submissions keep every value of repeated list fields such as ``skills``.
    """
    data = request.data
    if not isinstance(data, Mapping):
        return None
    if hasattr(data, 'lists'):
        return {
            key: values if key in _LIST_FIELDS else values[-1]
            for key, values in data.lists()
        }
    return dict(data)


def _workflow():
    return ApplicationWorkflow()


# Simple ping endpoint for uptime monitoring (public)
@api_view(['GET'])
@permission_classes([AllowAny])
@authentication_classes([])
def health_ping(request):
    """
    Public health ping. Returns 200 OK if the application can reach the database.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return Response({"status": "ok"}, status=status.HTTP_200_OK)
    except DatabaseError:
        logger.error("Health ping could not reach the database", exc_info=True)
        return Response({"status": "error"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


# Account role

@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def account_role(request):
    """
    GET: Return the account role.
    PUT: Choose the account role ("candidate" or "recruiter").
    """
    account = ensure_account(request.user)

    if request.method == 'GET':
        if not account.role:
            raise NotFoundError('User role not found. Please complete your profile setup.', code='role_not_found')
        return Response({'role': account.role, 'user_id': str(account.id)})

    serializer = RoleSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)

    account.role = serializer.validated_data['role']
    account.save(update_fields=['role', 'updated_at'])
    logger.info(f"Account {account.id} role set to {account.role}")
    return Response({'role': account.role, 'user_id': str(account.id)})


# Candidate profile

@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def candidate_profile(request):
    """
    GET: Return the caller's candidate profile.
    PUT: Create the profile on first save, otherwise apply the fields sent.

    Validation failures come back as field-keyed lists, e.g.
    {"error": {"code": "validation_error", "details": {"experience.0.company": ["This field is required."]}}}
    """
    account = ensure_account(request.user)

    if request.method == 'GET':
        profile = fetch_candidate_profile(account)
        if profile is None:
            raise NotFoundError('Candidate profile not found.', code='profile_not_found')
        return Response(CandidateProfileSerializer(profile).data)

    payload = _payload(request)
    if payload is None:
        return _validation_error_response({'non_field_errors': ['Invalid data. Expected an object.']})

    profile, created = upsert_candidate_profile(account, payload)
    if not account.role:
        account.role = 'candidate'
        account.save(update_fields=['role', 'updated_at'])
    return Response(
        CandidateProfileSerializer(profile).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


# Resume

@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def resume(request):
    """
    POST: Upload or replace the caller's resume (multipart field "resume").
    DELETE: Remove the stored resume and clear it from the profile.
    """
    account = ensure_account(request.user)
    profile = fetch_candidate_profile(account)
    if profile is None:
        raise NotFoundError('Complete your candidate profile before uploading a resume.', code='profile_not_found')

    if request.method == 'DELETE':
        if not profile.resume_path and not profile.resume_url:
            raise NotFoundError('No resume to delete.', code='no_resume')
        delete_resume_file(profile)
        return Response({'message': 'Resume deleted successfully'}, status=status.HTTP_200_OK)

    serializer = ResumeUploadSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)

    upload = serializer.validated_data['resume']
    is_valid, error_msg = validate_resume_file(upload)
    if not is_valid:
        return Response(
            {'error': {'code': 'invalid_file', 'message': error_msg}},
            status=status.HTTP_400_BAD_REQUEST,
        )

    save_resume_file(profile, upload, request=request)
    return Response(
        {
            'resume_url': profile.resume_url,
            'resume': {
                'original_name': profile.resume_original_name,
                'size': profile.resume_size,
                'mime_type': profile.resume_mime,
                'updated_at': profile.resume_updated_at,
            },
            'message': 'Resume uploaded successfully',
        },
        status=status.HTTP_200_OK,
    )


# Recruiter profile

@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated])
def recruiter_profile(request):
    """
    GET: Return the recruiter profile.
    POST: Create it (409 if one exists); the account becomes a recruiter.
    PUT: Update the fields sent.
    """
    account = ensure_account(request.user)
    profile = RecruiterProfile.objects.filter(account=account).first()

    if request.method == 'GET':
        if profile is None:
            raise NotFoundError('Recruiter profile not found.', code='profile_not_found')
        return Response(RecruiterProfileSerializer(profile).data)

    if request.method == 'POST':
        if profile is not None:
            raise ConflictError('A recruiter profile already exists for this account.', code='profile_exists')
        serializer = RecruiterProfileSerializer(data=request.data)
        if not serializer.is_valid():
            return _validation_error_response(serializer.errors)
        try:
            profile = serializer.save(account=account)
        except IntegrityError:
            raise ConflictError('A recruiter profile already exists for this account.', code='profile_exists')
        if account.role != 'recruiter':
            account.role = 'recruiter'
            account.save(update_fields=['role', 'updated_at'])
        logger.info(f"Recruiter profile created for account {account.id}")
        return Response(RecruiterProfileSerializer(profile).data, status=status.HTTP_201_CREATED)

    if profile is None:
        raise NotFoundError('Recruiter profile not found.', code='profile_not_found')
    serializer = RecruiterProfileSerializer(profile, data=request.data, partial=True)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)
    serializer.save()
    return Response(serializer.data)


# Jobs

@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def jobs_list_create(request):
    """
    GET: Public list of jobs accepting applications.
         ?deadline=urgent|week|month|no_deadline|all (default all, hides expired)
         ?sort=deadline|-deadline (default newest first)
         ?q=<text> matches title, company or location
    POST: Create a job owned by the calling recruiter.
    """
    if request.method == 'GET':
        qs = Job.objects.filter(Q(status='open') | Q(status__isnull=True)).order_by('-created_at')
        query = (request.query_params.get('q') or '').strip()
        if query:
            qs = qs.filter(Q(title__icontains=query) | Q(company__icontains=query) | Q(location__icontains=query))

        deadline_filter = request.query_params.get('deadline') or 'all'
        if deadline_filter not in DEADLINE_FILTERS:
            return _validation_error_response(
                {'deadline': [f"Must be one of: {', '.join(DEADLINE_FILTERS)}"]}
            )
        jobs = filter_jobs_by_deadline(list(qs), deadline_filter)

        sort = request.query_params.get('sort')
        if sort in ('deadline', '-deadline'):
            jobs = sort_jobs_by_deadline(jobs, order='desc' if sort.startswith('-') else 'asc')
        return Response(JobSerializer(jobs, many=True).data)

    if not request.user or not request.user.is_authenticated:
        raise NotAuthenticated()
    if not IsRecruiter().has_permission(request, None):
        raise AuthorizationError(IsRecruiter.message)

    serializer = JobSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)
    account = ensure_account(request.user)
    job = serializer.save(employer=account)
    logger.info(f"Job {job.id} created by recruiter {account.id}")
    return Response(JobSerializer(job).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsRecruiter])
def recruiter_jobs(request):
    """Jobs owned by the calling recruiter, with application counts."""
    account = ensure_account(request.user)
    jobs = (
        Job.objects.filter(employer=account)
        .annotate(application_count=Count('applications'))
        .order_by('-created_at')
    )
    return Response(RecruiterJobSerializer(jobs, many=True).data)


@api_view(['GET', 'PATCH'])
@permission_classes([AllowAny])
def job_detail(request, job_id):
    """
    GET: Public job detail including supplemental questions.
    PATCH: Update a job; only its owner (or any recruiter for an unowned job).
    """
    workflow = _workflow()
    job = workflow.get_job(job_id)

    if request.method == 'GET':
        return Response(JobSerializer(job).data)

    if not request.user or not request.user.is_authenticated:
        raise NotAuthenticated()
    account = ensure_account(request.user)
    if not workflow.can_manage_job(job, account):
        raise AuthorizationError('You can only edit your own job postings.')

    serializer = JobSerializer(job, data=request.data, partial=True)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)
    old_status = job.status
    job = serializer.save()
    if job.status != old_status:
        logger.info(f"Job {job.id} status {old_status} -> {job.status} by {account.id}")
    return Response(JobSerializer(job).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_applications(request, job_id):
    """Applications for a job, visible to the job's owner."""
    workflow = _workflow()
    job = workflow.get_job(job_id)
    account = ensure_account(request.user)
    if not workflow.can_manage_job(job, account):
        raise AuthorizationError('You can only view applications for your own job postings.')

    applications = (
        Application.objects.filter(job=job)
        .select_related('job', 'candidate', 'candidate__candidate_profile')
        .order_by('-applied_at')
    )
    return Response({
        'job': JobSerializer(job).data,
        'applications': RecruiterApplicationSerializer(applications, many=True).data,
    })


# Applications

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def applications_list_create(request):
    """
    GET: The caller's own applications, newest first.
    POST: Apply to a job.

    Accepted body shapes:
      {"job_id": "...", "supplemental_answers": {"q1": "..."}}
      {"jobId": "...", "supplementalAnswers": [{"questionId": "q1", "answer": "..."}]}
      {"job_id": "...", "details": {"answers": {"q1": "..."}, "coverLetter": "..."}}
    """
    account = ensure_account(request.user)

    if request.method == 'GET':
        applications = (
            Application.objects.filter(candidate=account)
            .select_related('job')
            .order_by('-applied_at')
        )
        return Response(ApplicationSerializer(applications, many=True).data)

    serializer = ApplicationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)

    data = serializer.validated_data
    result = _workflow().create_application(
        job_id=data['job_id'],
        candidate=account,
        answers=data.get('supplemental_answers'),
        resume_url=data.get('resume_url'),
        cover_letter=data.get('cover_letter'),
    )
    return Response(
        {
            'created': result.created,
            'status': result.status,
            'application': ApplicationSerializer(result.application).data,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def application_detail(request, application_id):
    """
    GET: Application detail for its candidate or the job owner.
    PATCH: {"status": "Under Review"} moves the application to a new status.
    """
    workflow = _workflow()
    account = ensure_account(request.user)

    if request.method == 'GET':
        application = workflow.get_application(application_id=application_id)
        if not workflow.can_view_application(application, account):
            raise AuthorizationError('You do not have access to this application.')
        return Response(ApplicationSerializer(application).data)

    serializer = ApplicationStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)

    application = workflow.update_status(
        serializer.validated_data['status'],
        account,
        application_id=application_id,
    )
    return Response(ApplicationSerializer(application).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def application_status_by_job(request, job_id):
    """
    Update status by (job, candidate). ``candidate_id`` defaults to the caller,
    so a candidate can address their own application with just the job id.
    """
    serializer = ApplicationStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return _validation_error_response(serializer.errors)

    account = ensure_account(request.user)
    candidate_id = serializer.validated_data.get('candidate_id') or account.id
    application = _workflow().update_status(
        serializer.validated_data['status'],
        account,
        job_id=job_id,
        candidate_id=candidate_id,
    )
    return Response(ApplicationSerializer(application).data)
