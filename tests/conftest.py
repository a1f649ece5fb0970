"""Fixtures do Taskboard para pytest-django"""
import pytest
from django.core.cache import cache

from apps.core.models import Membership, User
from apps.core.services import store


@pytest.fixture(autouse=True)
def _limpar_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def owner(db) -> User:
    return User.objects.create_user(
        username='ana', email='ana@example.com', password='senha-forte-123', display_name='Ana Souza'
    )


@pytest.fixture()
def outsider(db) -> User:
    return User.objects.create_user(username='bruno', email='bruno@example.com', password='senha-forte-123')


@pytest.fixture()
def member(db) -> User:
    return User.objects.create_user(username='carla', email='carla@example.com', password='senha-forte-123')


@pytest.fixture()
def project_board(owner):
    """Projeto 'Acme' criado pelo fluxo completo (projeto, dono, board)"""
    return store.create_project(owner, 'Acme', 'Site novo')


@pytest.fixture()
def project(project_board):
    return project_board[0]


@pytest.fixture()
def board(project_board):
    return project_board[1]


@pytest.fixture()
def project_with_member(owner, project, member):
    store.insert_membership(owner, project, member, Membership.Role.MEMBER)
    return project


@pytest.fixture()
def owner_client(client, owner):
    client.force_login(owner)
    return client


@pytest.fixture()
def outsider_client(client, outsider):
    client.force_login(outsider)
    return client
