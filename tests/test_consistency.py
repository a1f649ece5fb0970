import pytest

from apps.core.consistency import (
    STATUSES,
    can_assign,
    can_view,
    compute_insert_position,
    compute_move,
    find_position_conflicts,
    partition,
    renumber,
)


def _task(id, status, position, project_id=1):
    return {'id': id, 'status': status, 'position': position, 'project_id': project_id}


class TestPartition:
    def test_every_status_present_even_when_empty(self):
        colunas = partition([])
        assert list(colunas) == list(STATUSES)
        assert all(col == [] for col in colunas.values())

    def test_groups_and_sorts_by_position(self):
        tasks = [
            _task(1, 'todo', 2),
            _task(2, 'done', 0),
            _task(3, 'todo', 0),
            _task(4, 'todo', 1),
        ]
        colunas = partition(tasks)
        assert [t['id'] for t in colunas['todo']] == [3, 4, 1]
        assert [t['id'] for t in colunas['done']] == [2]
        assert colunas['review'] == []

    def test_ties_keep_input_order(self):
        tasks = [_task(7, 'review', 3), _task(5, 'review', 3)]
        assert [t['id'] for t in partition(tasks)['review']] == [7, 5]

    def test_every_task_lands_in_exactly_one_column(self):
        tasks = [_task(i, STATUSES[i % 4], i) for i in range(10)]
        colunas = partition(tasks)
        ids = sorted(t['id'] for col in colunas.values() for t in col)
        assert ids == list(range(10))

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            partition([_task(1, 'archived', 0)])


class TestComputeInsertPosition:
    def test_empty_column_starts_at_zero(self):
        assert compute_insert_position([]) == 0

    def test_appends_after_max(self):
        assert compute_insert_position([_task(1, 'todo', 0), _task(2, 'todo', 1)]) == 2

    def test_uses_max_not_count_when_there_are_gaps(self):
        assert compute_insert_position([_task(1, 'todo', 0), _task(2, 'todo', 2)]) == 3


class TestComputeMove:
    def test_drop_in_same_place_is_noop(self):
        task = _task(1, 'todo', 3)
        assert compute_move(task, 'todo', 'todo', 3) is None

    def test_explicit_source_index_drives_noop(self):
        task = _task(1, 'todo', 9)
        assert compute_move(task, 'todo', 'todo', 2, source_index=2) is None

    def test_cross_column_move_takes_destination_index(self):
        task = _task(1, 'todo', 0)
        assert compute_move(task, 'todo', 'done', 4) == {'status': 'done', 'position': 4}

    def test_same_column_reorder(self):
        task = _task(1, 'review', 0)
        assert compute_move(task, 'review', 'review', 2) == {'status': 'review', 'position': 2}


class TestVisibility:
    project = {'id': 10, 'owner_id': 1}

    def test_owner_sees_project_without_membership(self):
        assert can_view(1, self.project, []) is True

    def test_member_sees_project(self):
        assert can_view(2, self.project, [{'project_id': 10, 'user_id': 2}]) is True

    def test_membership_of_other_project_does_not_count(self):
        assert can_view(2, self.project, [{'project_id': 11, 'user_id': 2}]) is False

    def test_anonymous_sees_nothing(self):
        assert can_view(None, self.project, [{'project_id': 10, 'user_id': None}]) is False


class TestCanAssign:
    def test_member_can_be_assigned(self):
        task = _task(1, 'todo', 0, project_id=10)
        assert can_assign(2, task, [{'project_id': 10, 'user_id': 2}]) is True

    def test_non_member_cannot_be_assigned(self):
        task = _task(1, 'todo', 0, project_id=10)
        assert can_assign(3, task, [{'project_id': 10, 'user_id': 2}]) is False

    def test_anonymous_cannot_be_assigned(self):
        assert can_assign(None, _task(1, 'todo', 0), []) is False


class TestIntegrityHelpers:
    def test_find_position_conflicts(self):
        tasks = [
            _task(1, 'todo', 0),
            _task(2, 'todo', 0),
            _task(3, 'done', 0),
            _task(4, 'done', 1),
            _task(5, 'done', 1),
        ]
        assert find_position_conflicts(tasks) == [('done', 1), ('todo', 0)]

    def test_no_conflicts(self):
        assert find_position_conflicts([_task(1, 'todo', 0), _task(2, 'done', 0)]) == []

    def test_renumber_only_returns_changed_tasks(self):
        column = [_task(1, 'todo', 0), _task(2, 'todo', 0), _task(3, 'todo', 5)]
        mudancas = renumber(column)
        assert [(t['id'], pos) for t, pos in mudancas] == [(2, 1), (3, 2)]
