"""
URL configuration for the hiring API.
"""
from django.urls import path

from hiring import views

urlpatterns = [
    path('health/ping', views.health_ping, name='health-ping'),

    # Account and profiles
    path('profile/role', views.account_role, name='account-role'),
    path('profile/recruiter', views.recruiter_profile, name='recruiter-profile'),
    path('candidate-profile', views.candidate_profile, name='candidate-profile'),
    path('resume', views.resume, name='resume'),

    # Jobs
    path('jobs', views.jobs_list_create, name='jobs-list-create'),
    path('jobs/recruiter', views.recruiter_jobs, name='recruiter-jobs'),
    path('jobs/<uuid:job_id>', views.job_detail, name='job-detail'),
    path('jobs/<uuid:job_id>/applications', views.job_applications, name='job-applications'),

    # Applications
    path('applications', views.applications_list_create, name='applications-list-create'),
    path('applications/<uuid:application_id>', views.application_detail, name='application-detail'),
    path('applications/job/<uuid:job_id>/status', views.application_status_by_job, name='application-status-by-job'),
]
