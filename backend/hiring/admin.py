from django.contrib import admin

from .models import (
    Application, ApplicationStatusChange, CandidateProfile, Job, RecruiterProfile, UserAccount,
)


@admin.register(UserAccount)
class UserAccountAdmin(admin.ModelAdmin):
    list_display = ['email', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['email', 'user__username']


@admin.register(CandidateProfile)
class CandidateProfileAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'location', 'years_of_experience', 'updated_at']
    search_fields = ['name', 'email', 'account__user__username']
    readonly_fields = ['resume_path', 'resume_mime', 'resume_size', 'resume_updated_at']


@admin.register(RecruiterProfile)
class RecruiterProfileAdmin(admin.ModelAdmin):
    list_display = ['name', 'company_name', 'job_title', 'company_size']
    list_filter = ['company_size']
    search_fields = ['name', 'email', 'company_name']


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['title', 'company', 'status', 'deadline', 'employer', 'created_at']
    list_filter = ['status']
    search_fields = ['title', 'company', 'location']


class ApplicationStatusChangeInline(admin.TabularInline):
    model = ApplicationStatusChange
    extra = 0
    readonly_fields = ['old_status', 'new_status', 'changed_by', 'changed_at']


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['job', 'candidate', 'status', 'applied_at']
    list_filter = ['status']
    search_fields = ['job__title', 'candidate__email']
    inlines = [ApplicationStatusChangeInline]
