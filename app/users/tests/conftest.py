"""
Test configuration and fixtures for user directory tests.

Provides users, their identities and API clients that authenticate with
identity-provider tokens.
"""

import pytest
from rest_framework.test import APIClient

from users.tests.factories import UserFactory, identity_for, issue_identity_token


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    return UserFactory(name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def other_user(db):
    return UserFactory(name="Grace Hopper", email="grace@example.com")


@pytest.fixture
def identity(user):
    """Identity of the `user` fixture."""
    return identity_for(user)


@pytest.fixture
def auth_client(user):
    """API client authenticated as the `user` fixture."""
    client = APIClient()
    token = issue_identity_token(user.token_identifier, name=user.name, email=user.email)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def new_identity_client(db):
    """API client whose identity has no user record yet."""
    client = APIClient()
    token = issue_identity_token(
        "user_newcomer",
        name="New Comer",
        email="newcomer@example.com",
        picture="https://img.example.com/newcomer.png",
    )
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def legacy_user_table(transactional_db):
    """
    User table without the unique token constraint, as it was before 0002.

    Lets tests store duplicate records. Runs outside a test transaction
    because SQLite cannot alter tables inside one.
    """
    from django.db import connection

    from users.models import User

    constraint = next(
        c for c in User._meta.constraints if c.name == "unique_user_token_identifier"
    )
    # SQLite rebuilds the table from the model's Meta constraints, so the
    # constraint has to be absent there while the table is remade.
    original_constraints = User._meta.constraints
    User._meta.constraints = [c for c in original_constraints if c is not constraint]
    try:
        with connection.schema_editor() as editor:
            editor.remove_constraint(User, constraint)
    finally:
        User._meta.constraints = original_constraints

    yield

    User.objects.all().delete()
    with connection.schema_editor() as editor:
        editor.add_constraint(User, constraint)
