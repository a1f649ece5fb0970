import pytest
from django.urls import reverse

from apps.core.services import store


@pytest.mark.django_db
@pytest.mark.parametrize('modelo', ['user', 'project', 'membership', 'board', 'task', 'comment'])
def test_changelists_load(admin_client, owner, board, modelo):
    task = store.create_task(owner, board.id, 'A')
    store.insert_comment(owner, task.id, 'oi')

    response = admin_client.get(reverse(f'admin:core_{modelo}_changelist'))

    assert response.status_code == 200


@pytest.mark.django_db
def test_task_change_page(admin_client, owner, board):
    task = store.create_task(owner, board.id, 'A')

    response = admin_client.get(reverse('admin:core_task_change', args=[task.id]))

    assert response.status_code == 200
