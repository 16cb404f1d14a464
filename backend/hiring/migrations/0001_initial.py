import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


APPLICATION_STATUS_CHOICES = [
    ('applied', 'Applied'), ('under_review', 'Under Review'), ('interview', 'Interview'),
    ('offer', 'Offer'), ('hired', 'Hired'), ('rejected', 'Rejected'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserAccount',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(db_index=True, max_length=254, unique=True)),
                ('role', models.CharField(blank=True, choices=[('candidate', 'Candidate'), ('recruiter', 'Recruiter')], max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='account', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [models.Index(fields=['email'], name='hiring_account_email_idx')],
            },
        ),
        migrations.CreateModel(
            name='CandidateProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('phone', models.CharField(blank=True, max_length=32, null=True)),
                ('education', models.CharField(blank=True, max_length=200, null=True)),
                ('major', models.CharField(blank=True, max_length=200, null=True)),
                ('school', models.CharField(blank=True, max_length=200, null=True)),
                ('degree_level', models.CharField(blank=True, max_length=100, null=True)),
                ('graduation_date', models.DateField(blank=True, null=True)),
                ('gpa', models.FloatField(blank=True, null=True)),
                ('years_of_experience', models.PositiveIntegerField(blank=True, null=True)),
                ('resume_url', models.URLField(blank=True, max_length=500, null=True)),
                ('resume_path', models.CharField(blank=True, max_length=500, null=True)),
                ('resume_original_name', models.CharField(blank=True, max_length=255, null=True)),
                ('resume_mime', models.CharField(blank=True, max_length=120, null=True)),
                ('resume_size', models.PositiveBigIntegerField(blank=True, null=True)),
                ('resume_updated_at', models.DateTimeField(blank=True, null=True)),
                ('skills', models.JSONField(blank=True, default=list)),
                ('experience', models.JSONField(blank=True, default=list)),
                ('certifications', models.JSONField(blank=True, default=list)),
                ('employment_types', models.JSONField(blank=True, default=list)),
                ('languages', models.JSONField(blank=True, default=list)),
                ('frameworks', models.JSONField(blank=True, default=list)),
                ('linkedin_url', models.URLField(blank=True, max_length=500, null=True)),
                ('github_url', models.URLField(blank=True, max_length=500, null=True)),
                ('portfolio_url', models.URLField(blank=True, max_length=500, null=True)),
                ('website_url', models.URLField(blank=True, max_length=500, null=True)),
                ('twitter_url', models.URLField(blank=True, max_length=500, null=True)),
                ('mastodon_url', models.URLField(blank=True, max_length=500, null=True)),
                ('dribbble_url', models.URLField(blank=True, max_length=500, null=True)),
                ('leetcode_url', models.URLField(blank=True, max_length=500, null=True)),
                ('codeforces_url', models.URLField(blank=True, max_length=500, null=True)),
                ('hackerrank_url', models.URLField(blank=True, max_length=500, null=True)),
                ('location', models.CharField(blank=True, max_length=160, null=True)),
                ('timezone', models.CharField(blank=True, max_length=64, null=True)),
                ('work_authorization', models.CharField(blank=True, max_length=120, null=True)),
                ('requires_sponsorship', models.BooleanField(blank=True, null=True)),
                ('open_to_relocation', models.BooleanField(blank=True, null=True)),
                ('pronouns', models.CharField(blank=True, max_length=50, null=True)),
                ('referral_source', models.CharField(blank=True, max_length=120, null=True)),
                ('offer_deadline', models.DateTimeField(blank=True, null=True)),
                ('eeo_gender', models.CharField(blank=True, max_length=100, null=True)),
                ('eeo_race_ethnicity', models.CharField(blank=True, max_length=100, null=True)),
                ('eeo_veteran_status', models.CharField(blank=True, max_length=100, null=True)),
                ('eeo_disability_status', models.CharField(blank=True, max_length=100, null=True)),
                ('eeo_prefer_not_to_say', models.BooleanField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='candidate_profile', to='hiring.useraccount')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['account'], name='hiring_cand_account_idx'),
                    models.Index(fields=['offer_deadline'], name='hiring_cand_deadline_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RecruiterProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('company_name', models.CharField(max_length=180)),
                ('job_title', models.CharField(max_length=120)),
                ('company_size', models.CharField(blank=True, choices=[('startup', 'Startup'), ('small', 'Small'), ('medium', 'Medium'), ('large', 'Large'), ('enterprise', 'Enterprise')], max_length=20)),
                ('phone', models.CharField(blank=True, max_length=32)),
                ('linkedin_url', models.URLField(blank=True, max_length=500)),
                ('company_website', models.URLField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='recruiter_profile', to='hiring.useraccount')),
            ],
        ),
        migrations.CreateModel(
            name='Job',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('company', models.CharField(max_length=180)),
                ('location', models.CharField(blank=True, max_length=160, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('salary_range', models.CharField(blank=True, max_length=120, null=True)),
                ('requirements', models.JSONField(blank=True, null=True)),
                ('status', models.CharField(blank=True, choices=[('draft', 'Draft'), ('open', 'Open'), ('closed', 'Closed')], default='open', max_length=20, null=True)),
                ('deadline', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='jobs', to='hiring.useraccount')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['employer', '-created_at'], name='hiring_job_employer_idx'),
                    models.Index(fields=['status', 'deadline'], name='hiring_job_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Application',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=APPLICATION_STATUS_CHOICES, default='applied', max_length=20)),
                ('resume_url', models.URLField(blank=True, max_length=500, null=True)),
                ('cover_letter', models.TextField(blank=True, null=True)),
                ('supplemental_answers', models.JSONField(blank=True, null=True)),
                ('applied_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('candidate', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='hiring.useraccount')),
                ('job', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='hiring.job')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['candidate', '-applied_at'], name='hiring_app_candidate_idx'),
                    models.Index(fields=['job', '-applied_at'], name='hiring_app_job_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('job', 'candidate'), name='unique_application_per_candidate'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ApplicationStatusChange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_status', models.CharField(choices=APPLICATION_STATUS_CHOICES, max_length=20)),
                ('new_status', models.CharField(choices=APPLICATION_STATUS_CHOICES, max_length=20)),
                ('changed_at', models.DateTimeField(auto_now_add=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_changes', to='hiring.application')),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='hiring.useraccount')),
            ],
            options={
                'ordering': ['-changed_at'],
                'indexes': [models.Index(fields=['application', '-changed_at'], name='hiring_status_change_idx')],
            },
        ),
    ]
