from io import StringIO

import pytest
from django.core.management import call_command

from apps.core.models import Assignment, Board, Membership, Project, Task
from apps.core.services import store


def _run(*args):
    out = StringIO()
    call_command('check_board_integrity', *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestCheckBoardIntegrity:
    def test_clean_database(self, project):
        assert 'Nenhum problema' in _run()

    def test_reports_and_fixes_project_without_owner_membership(self, owner):
        project = Project.objects.create(name='Órfão', owner=owner)

        saida = _run()
        assert 'Órfão' in saida
        assert not Membership.objects.filter(project=project).exists()

        _run('--fix')
        assert Membership.objects.get(project=project).role == Membership.Role.OWNER

    def test_reports_and_renumbers_position_conflicts(self, owner, board):
        a = store.create_task(owner, board.id, 'A')
        b = store.create_task(owner, board.id, 'B')
        store.move_task(owner, b.id, 'todo', 0)

        assert 'posição 0 repetida em todo' in _run()

        _run('--fix')
        posicoes = sorted(Task.objects.filter(board=board).values_list('position', flat=True))
        assert posicoes == [0, 1]
        assert 'Nenhum problema' in _run()

    def test_reports_assignment_without_membership(self, owner, outsider, board):
        task = store.create_task(owner, board.id, 'A')
        Assignment.objects.create(task=task, user=outsider)

        assert 'bruno' in _run()

    def test_owner_assignment_needs_membership_row(self, owner):
        project = Project.objects.create(name='Órfão', owner=owner)
        board = Board.objects.create(project=project, name='Principal')
        task = Task.objects.create(board=board, title='Sem vínculo', created_by=owner)
        Assignment.objects.create(task=task, user=owner)

        assert 'ana atribuído a "Sem vínculo"' in _run()
