# backend/hiring/models.py
from django.conf import settings
from django.db import models
import uuid


class UserAccount(models.Model):
    """Application-level identity record with a UUID id and normalized unique email.

    Every other table refers to people through this id (``user_id``,
    ``candidate_id``, ``employer_id``). The one-to-one link to the Django user
    keeps the Firebase UID (stored as the username) out of the domain tables.
    """
    ROLE_CHOICES = [
        ('candidate', 'Candidate'),
        ('recruiter', 'Recruiter'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='account')
    email = models.EmailField(unique=True, db_index=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["email"], name="hiring_account_email_idx")]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        return super().save(*args, **kwargs)

    @property
    def is_recruiter(self):
        return self.role == 'recruiter'

    def __str__(self):
        return self.email or str(self.id)


class CandidateProfile(models.Model):
    """Normalized candidate data. Only hiring.candidate_profile writes these rows."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(UserAccount, on_delete=models.CASCADE, related_name='candidate_profile')

    # Contact
    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, null=True, blank=True)

    # Education
    education = models.CharField(max_length=200, null=True, blank=True)
    major = models.CharField(max_length=200, null=True, blank=True)
    school = models.CharField(max_length=200, null=True, blank=True)
    degree_level = models.CharField(max_length=100, null=True, blank=True)
    graduation_date = models.DateField(null=True, blank=True)
    gpa = models.FloatField(null=True, blank=True)
    years_of_experience = models.PositiveIntegerField(null=True, blank=True)

    # Resume (one per profile)
    resume_url = models.URLField(max_length=500, null=True, blank=True)
    resume_path = models.CharField(max_length=500, null=True, blank=True)
    resume_original_name = models.CharField(max_length=255, null=True, blank=True)
    resume_mime = models.CharField(max_length=120, null=True, blank=True)
    resume_size = models.PositiveBigIntegerField(null=True, blank=True)
    resume_updated_at = models.DateTimeField(null=True, blank=True)

    # Structured lists
    skills = models.JSONField(default=list, blank=True)
    experience = models.JSONField(default=list, blank=True)
    certifications = models.JSONField(default=list, blank=True)
    employment_types = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)
    frameworks = models.JSONField(default=list, blank=True)

    # Profile links
    linkedin_url = models.URLField(max_length=500, null=True, blank=True)
    github_url = models.URLField(max_length=500, null=True, blank=True)
    portfolio_url = models.URLField(max_length=500, null=True, blank=True)
    website_url = models.URLField(max_length=500, null=True, blank=True)
    twitter_url = models.URLField(max_length=500, null=True, blank=True)
    mastodon_url = models.URLField(max_length=500, null=True, blank=True)
    dribbble_url = models.URLField(max_length=500, null=True, blank=True)
    leetcode_url = models.URLField(max_length=500, null=True, blank=True)
    codeforces_url = models.URLField(max_length=500, null=True, blank=True)
    hackerrank_url = models.URLField(max_length=500, null=True, blank=True)

    # Preferences
    location = models.CharField(max_length=160, null=True, blank=True)
    timezone = models.CharField(max_length=64, null=True, blank=True)
    work_authorization = models.CharField(max_length=120, null=True, blank=True)
    requires_sponsorship = models.BooleanField(null=True, blank=True)
    open_to_relocation = models.BooleanField(null=True, blank=True)
    pronouns = models.CharField(max_length=50, null=True, blank=True)
    referral_source = models.CharField(max_length=120, null=True, blank=True)
    offer_deadline = models.DateTimeField(null=True, blank=True)

    # Voluntary EEO disclosures
    eeo_gender = models.CharField(max_length=100, null=True, blank=True)
    eeo_race_ethnicity = models.CharField(max_length=100, null=True, blank=True)
    eeo_veteran_status = models.CharField(max_length=100, null=True, blank=True)
    eeo_disability_status = models.CharField(max_length=100, null=True, blank=True)
    eeo_prefer_not_to_say = models.BooleanField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["account"], name="hiring_cand_account_idx"),
            models.Index(fields=["offer_deadline"], name="hiring_cand_deadline_idx"),
        ]

    @property
    def user_id(self):
        return self.account_id

    def __str__(self):
        return f"{self.name} <{self.email}>"


class RecruiterProfile(models.Model):
    COMPANY_SIZES = [
        ('startup', 'Startup'),
        ('small', 'Small'),
        ('medium', 'Medium'),
        ('large', 'Large'),
        ('enterprise', 'Enterprise'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(UserAccount, on_delete=models.CASCADE, related_name='recruiter_profile')
    name = models.CharField(max_length=100)
    email = models.EmailField()
    company_name = models.CharField(max_length=180)
    job_title = models.CharField(max_length=120)
    company_size = models.CharField(max_length=20, choices=COMPANY_SIZES, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    linkedin_url = models.URLField(max_length=500, blank=True)
    company_website = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.company_name})"


class Job(models.Model):
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('open', 'Open'),
        ('closed', 'Closed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Null employer marks a legacy posting created before ownership was tracked
    employer = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='jobs')
    title = models.CharField(max_length=200)
    company = models.CharField(max_length=180)
    location = models.CharField(max_length=160, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    salary_range = models.CharField(max_length=120, null=True, blank=True)
    requirements = models.JSONField(null=True, blank=True)
    # Null only on legacy rows
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='open', null=True, blank=True)
    deadline = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["employer", "-created_at"], name="hiring_job_employer_idx"),
            models.Index(fields=["status", "deadline"], name="hiring_job_status_idx"),
        ]

    @property
    def supplemental_questions(self):
        reqs = self.requirements if isinstance(self.requirements, dict) else None
        questions = (reqs or {}).get('supplementalQuestions')
        return questions if isinstance(questions, list) else []

    def __str__(self):
        return f"{self.title} at {self.company}"


class Application(models.Model):
    STATUS_CHOICES = [
        ('applied', 'Applied'),
        ('under_review', 'Under Review'),
        ('interview', 'Interview'),
        ('offer', 'Offer'),
        ('hired', 'Hired'),
        ('rejected', 'Rejected'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    candidate = models.ForeignKey(UserAccount, on_delete=models.CASCADE, related_name='applications')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='applied')
    resume_url = models.URLField(max_length=500, null=True, blank=True)
    cover_letter = models.TextField(null=True, blank=True)
    supplemental_answers = models.JSONField(null=True, blank=True)
    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["job", "candidate"], name="unique_application_per_candidate"),
        ]
        indexes = [
            models.Index(fields=["candidate", "-applied_at"], name="hiring_app_candidate_idx"),
            models.Index(fields=["job", "-applied_at"], name="hiring_app_job_idx"),
        ]

    def __str__(self):
        return f"{self.candidate_id} -> {self.job_id} ({self.status})"


class ApplicationStatusChange(models.Model):
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='status_changes')
    old_status = models.CharField(max_length=20, choices=Application.STATUS_CHOICES)
    new_status = models.CharField(max_length=20, choices=Application.STATUS_CHOICES)
    changed_by = models.ForeignKey(UserAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-changed_at']
        indexes = [models.Index(fields=["application", "-changed_at"], name="hiring_status_change_idx")]
