"""
Test fixtures and factories for creating test data.
Uses factory_boy for consistent test data generation.
"""
import factory
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory

from hiring.models import Application, CandidateProfile, Job, RecruiterProfile, UserAccount
from hiring.signals import ensure_account

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Factory for Django users; the username plays the Firebase UID"""
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f'firebase-uid-{n}')
    email = factory.Sequence(lambda n: f'user{n}@example.com')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True


class UserAccountFactory(DjangoModelFactory):
    """Returns the account the post_save signal created, with the requested role"""
    class Meta:
        model = UserAccount

    user = factory.SubFactory(UserFactory)
    role = 'candidate'

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        user = kwargs.pop('user')
        account = ensure_account(user)
        for attr, value in kwargs.items():
            setattr(account, attr, value)
        account.save()
        return account


class RecruiterAccountFactory(UserAccountFactory):
    role = 'recruiter'


class CandidateProfileFactory(DjangoModelFactory):
    """Factory for candidate profiles holding already-normalized data"""
    class Meta:
        model = CandidateProfile

    account = factory.SubFactory(UserAccountFactory)
    name = 'Jane Doe'
    email = factory.LazyAttribute(lambda obj: obj.account.email)
    phone = '(555) 123-4567'
    skills = factory.LazyFunction(lambda: ['python', 'django'])
    resume_url = factory.LazyAttribute(lambda obj: f'https://cdn.example.com/resumes/{obj.account.id}.pdf')


class RecruiterProfileFactory(DjangoModelFactory):
    class Meta:
        model = RecruiterProfile

    account = factory.SubFactory(RecruiterAccountFactory)
    name = factory.Faker('name')
    email = factory.LazyAttribute(lambda obj: obj.account.email)
    company_name = factory.Faker('company')
    job_title = 'Technical Recruiter'
    company_size = 'medium'


class JobFactory(DjangoModelFactory):
    class Meta:
        model = Job

    employer = factory.SubFactory(RecruiterAccountFactory)
    title = factory.Sequence(lambda n: f'Software Engineer {n}')
    company = factory.Faker('company')
    location = 'Remote'
    description = factory.Faker('text', max_nb_chars=200)
    status = 'open'


class ApplicationFactory(DjangoModelFactory):
    class Meta:
        model = Application

    job = factory.SubFactory(JobFactory)
    candidate = factory.SubFactory(UserAccountFactory)
    status = 'applied'
