import pytest
from django.conf import settings

from apps.core.exceptions import (
    AuthorizationFailure,
    ConflictFailure,
    NotFoundFailure,
    TransportFailure,
    ValidationFailure,
)
from apps.core.models import Assignment, Board, Comment, Membership, Project, Task
from apps.core.services import store


@pytest.mark.django_db
class TestCreateProject:
    def test_creates_project_owner_membership_and_default_board(self, owner):
        project, board = store.create_project(owner, 'Acme', 'Site novo')

        assert Project.objects.count() == 1
        assert project.owner == owner

        memberships = list(Membership.objects.all())
        assert len(memberships) == 1
        assert memberships[0].user == owner
        assert memberships[0].role == Membership.Role.OWNER

        assert Board.objects.count() == 1
        assert board.project == project
        assert board.name == settings.TASKBOARD_DEFAULT_BOARD_NAME

    def test_new_project_is_listed_for_owner_only(self, owner, outsider, project):
        pagina = store.list_projects_visible_to(owner)
        assert [p.name for p in pagina.object_list] == ['Acme']
        assert pagina.object_list[0].member_count == 1

        assert list(store.list_projects_visible_to(outsider).object_list) == []

    def test_blank_name_is_rejected_without_writing(self, owner):
        with pytest.raises(ValidationFailure):
            store.create_project(owner, '   ')

        assert Project.objects.count() == 0

    def test_board_failure_rolls_back_everything(self, owner, monkeypatch):
        def falha(*args, **kwargs):
            raise TransportFailure('Banco fora do ar.', step='inserir board')

        monkeypatch.setattr(store, 'insert_board', falha)

        with pytest.raises(TransportFailure) as excinfo:
            store.create_project(owner, 'Acme')

        assert excinfo.value.step == 'inserir board'
        assert Project.objects.count() == 0
        assert Membership.objects.count() == 0
        assert Board.objects.count() == 0

    def test_membership_failure_rolls_back_project(self, owner, monkeypatch):
        def falha(*args, **kwargs):
            raise ConflictFailure(step='inserir participação')

        monkeypatch.setattr(store, 'insert_membership', falha)

        with pytest.raises(ConflictFailure):
            store.create_project(owner, 'Acme')

        assert Project.objects.count() == 0


@pytest.mark.django_db
class TestReads:
    def test_member_sees_project_with_member_count(self, owner, member, project_with_member):
        pagina = store.list_projects_visible_to(member)
        assert [p.id for p in pagina.object_list] == [project_with_member.id]
        assert pagina.object_list[0].member_count == 2

    def test_projects_newest_first_and_paginated(self, owner):
        for nome in ('Um', 'Dois', 'Três'):
            store.create_project(owner, nome)

        pagina = store.list_projects_visible_to(owner, page=1, per_page=2)
        assert [p.name for p in pagina.object_list] == ['Três', 'Dois']
        assert pagina.paginator.num_pages == 2

    def test_get_project_denied_for_outsider(self, outsider, project):
        with pytest.raises(AuthorizationFailure):
            store.get_project(outsider, project.id)

    def test_get_missing_project(self, owner):
        with pytest.raises(NotFoundFailure):
            store.get_project(owner, 999)

    def test_get_board_returns_default_board(self, owner, project, board):
        assert store.get_board(owner, project.id) == board

    def test_list_tasks_annotates_comment_count(self, owner, board):
        task = store.create_task(owner, board.id, 'Login')
        store.insert_comment(owner, task.id, 'Primeiro')
        store.insert_comment(owner, task.id, 'Segundo')

        tasks = store.list_tasks(owner, board.id)
        assert tasks[0].comments_count == 2

    def test_comments_oldest_first(self, owner, board):
        task = store.create_task(owner, board.id, 'Login')
        for texto in ('a', 'b', 'c'):
            store.insert_comment(owner, task.id, texto)

        assert [c.content for c in store.list_comments(owner, task.id)] == ['a', 'b', 'c']


@pytest.mark.django_db
class TestTasks:
    def test_create_task_appends_to_its_column(self, owner, board):
        a = store.create_task(owner, board.id, 'A')
        b = store.create_task(owner, board.id, 'B')
        c = store.create_task(owner, board.id, 'C')
        d = store.create_task(owner, board.id, 'D', status=Task.Status.DONE)

        assert [a.position, b.position, c.position] == [0, 1, 2]
        assert d.position == 0

    def test_create_task_requires_title(self, owner, board):
        with pytest.raises(ValidationFailure):
            store.create_task(owner, board.id, '')

    def test_outsider_cannot_create_task(self, outsider, board):
        with pytest.raises(AuthorizationFailure):
            store.create_task(outsider, board.id, 'Intruso')

    def test_update_task_fields(self, owner, board):
        task = store.create_task(owner, board.id, 'Velho')
        store.update_task(owner, task.id, {'title': 'Novo', 'description': ' detalhes '})

        task.refresh_from_db()
        assert task.title == 'Novo'
        assert task.description == 'detalhes'

    def test_update_task_status_goes_to_end_of_column(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        store.create_task(owner, board.id, 'Feita', status=Task.Status.DONE)

        store.update_task(owner, task.id, {'status': Task.Status.DONE})

        task.refresh_from_db()
        assert task.status == Task.Status.DONE
        assert task.position == 1

    def test_update_task_rejects_unknown_fields(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(ValidationFailure):
            store.update_task(owner, task.id, {'position': 9})

    def test_update_missing_task(self, owner):
        with pytest.raises(NotFoundFailure):
            store.update_task(owner, 999, {'title': 'x'})

    def test_delete_task_removes_comments_and_assignments(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        store.insert_comment(owner, task.id, 'oi')
        store.toggle_assignment(owner, task.id, owner.id)

        store.delete_task(owner, task.id)

        assert Task.objects.count() == 0
        assert Comment.objects.count() == 0
        assert Assignment.objects.count() == 0


@pytest.mark.django_db
class TestMoveTask:
    def test_drop_in_same_place_writes_nothing(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        antes = Task.objects.get(id=task.id).updated_at

        _, moved = store.move_task(owner, task.id, Task.Status.TODO, 0)

        assert moved is False
        assert Task.objects.get(id=task.id).updated_at == antes

    def test_move_to_other_column(self, owner, board):
        task = store.create_task(owner, board.id, 'A')

        moved_task, moved = store.move_task(owner, task.id, Task.Status.IN_PROGRESS, 3)

        assert moved is True
        task.refresh_from_db()
        assert task.status == Task.Status.IN_PROGRESS
        assert task.position == 3
        assert moved_task.position == 3

    def test_siblings_are_not_renumbered(self, owner, board):
        a = store.create_task(owner, board.id, 'A', status=Task.Status.DONE)
        b = store.create_task(owner, board.id, 'B')

        store.move_task(owner, b.id, Task.Status.DONE, 0)

        a.refresh_from_db()
        b.refresh_from_db()
        assert (a.status, a.position) == (Task.Status.DONE, 0)
        assert (b.status, b.position) == (Task.Status.DONE, 0)

    @pytest.mark.parametrize('indice', [-1, True, '2', None])
    def test_invalid_index(self, owner, board, indice):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(ValidationFailure):
            store.move_task(owner, task.id, Task.Status.DONE, indice)

    def test_invalid_status(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(ValidationFailure):
            store.move_task(owner, task.id, 'archived', 0)

    def test_outsider_cannot_move(self, outsider, owner, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(AuthorizationFailure):
            store.move_task(outsider, task.id, Task.Status.DONE, 0)

        task.refresh_from_db()
        assert task.status == Task.Status.TODO

    def test_move_deleted_task(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        store.delete_task(owner, task.id)

        with pytest.raises(NotFoundFailure):
            store.move_task(owner, task.id, Task.Status.DONE, 0)


@pytest.mark.django_db
class TestAssignments:
    def test_toggle_assigns_then_unassigns(self, owner, member, project_with_member, board):
        task = store.create_task(owner, board.id, 'A')

        assert store.toggle_assignment(owner, task.id, member.id) is True
        assert list(task.assignees.all()) == [member]

        assert store.toggle_assignment(owner, task.id, member.id) is False
        assert task.assignees.count() == 0

    def test_non_member_cannot_be_assigned(self, owner, outsider, board):
        task = store.create_task(owner, board.id, 'A')

        with pytest.raises(AuthorizationFailure):
            store.toggle_assignment(owner, task.id, outsider.id)

        assert Assignment.objects.count() == 0

    def test_duplicate_assignment_is_a_conflict(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        store.insert_assignment(owner, task, owner)

        with pytest.raises(ConflictFailure):
            store.insert_assignment(owner, task, owner)

        assert Assignment.objects.count() == 1

    def test_removing_missing_assignment(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(NotFoundFailure):
            store.delete_assignment(owner, task, owner)

    def test_outsider_cannot_toggle(self, owner, outsider, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(AuthorizationFailure):
            store.toggle_assignment(outsider, task.id, owner.id)


@pytest.mark.django_db
class TestComments:
    def test_member_comments(self, owner, member, project_with_member, board):
        task = store.create_task(owner, board.id, 'A')
        comment = store.insert_comment(member, task.id, '  Pronto para revisão  ')

        assert comment.author == member
        assert comment.content == 'Pronto para revisão'

    def test_outsider_cannot_comment(self, owner, outsider, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(AuthorizationFailure):
            store.insert_comment(outsider, task.id, 'oi')

    def test_empty_comment(self, owner, board):
        task = store.create_task(owner, board.id, 'A')
        with pytest.raises(ValidationFailure):
            store.insert_comment(owner, task.id, '   ')

    def test_only_author_edits_or_deletes(self, owner, member, project_with_member, board):
        task = store.create_task(owner, board.id, 'A')
        comment = store.insert_comment(member, task.id, 'meu')

        with pytest.raises(AuthorizationFailure):
            store.update_comment(owner, comment.id, 'alterado')
        with pytest.raises(AuthorizationFailure):
            store.delete_comment(owner, comment.id)

        store.update_comment(member, comment.id, 'corrigido')
        comment.refresh_from_db()
        assert comment.content == 'corrigido'

        store.delete_comment(member, comment.id)
        assert Comment.objects.count() == 0


@pytest.mark.django_db
class TestMembers:
    def test_add_member_by_email(self, owner, member, project):
        membership = store.add_member(owner, project.id, 'CARLA@example.com')

        assert membership.user == member
        assert membership.role == Membership.Role.MEMBER
        assert store.list_projects_visible_to(member).object_list == [project]

    def test_add_member_twice_is_conflict(self, owner, member, project):
        store.add_member(owner, project.id, 'carla')
        with pytest.raises(ConflictFailure):
            store.add_member(owner, project.id, 'carla')

    def test_add_unknown_user(self, owner, project):
        with pytest.raises(NotFoundFailure):
            store.add_member(owner, project.id, 'ninguem')

    def test_second_owner_not_allowed(self, owner, member, project):
        with pytest.raises(ValidationFailure):
            store.add_member(owner, project.id, 'carla', Membership.Role.OWNER)

    def test_only_owner_adds_members(self, owner, member, outsider, project_with_member):
        with pytest.raises(AuthorizationFailure):
            store.add_member(member, project_with_member.id, 'bruno')

    def test_remove_member_drops_assignments(self, owner, member, project_with_member, board):
        task = store.create_task(owner, board.id, 'A')
        store.toggle_assignment(owner, task.id, member.id)

        store.remove_member(owner, project_with_member.id, member.id)

        assert not Membership.objects.filter(user=member).exists()
        assert Assignment.objects.count() == 0
        with pytest.raises(AuthorizationFailure):
            store.get_project(member, project_with_member.id)

    def test_owner_cannot_be_removed(self, owner, project):
        with pytest.raises(ValidationFailure):
            store.remove_member(owner, project.id, owner.id)


@pytest.mark.django_db
class TestProjectLifecycle:
    def test_update_project_owner_only(self, owner, member, project_with_member):
        with pytest.raises(AuthorizationFailure):
            store.update_project(member, project_with_member.id, 'Outro')

        project = store.update_project(owner, project_with_member.id, 'Acme 2', 'v2')
        assert project.name == 'Acme 2'

    def test_delete_project_cascades(self, owner, member, project_with_member, board):
        task = store.create_task(owner, board.id, 'A')
        store.insert_comment(owner, task.id, 'oi')
        store.toggle_assignment(owner, task.id, member.id)

        store.delete_project(owner, project_with_member.id)

        assert Project.objects.count() == 0
        assert Membership.objects.count() == 0
        assert Board.objects.count() == 0
        assert Task.objects.count() == 0
        assert Assignment.objects.count() == 0
        assert Comment.objects.count() == 0

    def test_member_cannot_delete_project(self, member, project_with_member):
        with pytest.raises(AuthorizationFailure):
            store.delete_project(member, project_with_member.id)

        assert Project.objects.count() == 1
