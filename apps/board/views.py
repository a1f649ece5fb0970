# apps/board/views.py

import json

from django.shortcuts import render
from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_POST
from django.http import JsonResponse, HttpResponse
from django.urls import reverse
from django_htmx.http import trigger_client_event

from apps.core.consistency import partition
from apps.core.exceptions import ValidationFailure
from apps.core.forms import CommentForm, TaskForm
from apps.core.models import Task
from apps.core.permissions import requires_project_access, TaskboardPermissions
from apps.core.services import store
from apps.core.utils import montar_colunas, primeiro_erro_form, redirecionar


@login_required
@requires_project_access
def board_kanban_view(request, project_id):
    """
    View principal do Kanban Board
    Uma coluna por status, tarefas ordenadas por posição
    """
    project = request.project  # Injetado pelo decorator

    board = store.get_board(request.user, project_id)
    colunas = montar_colunas(
        partition(store.list_tasks(request.user, board.id)),
        dict(Task.Status.choices)
    )

    context = {
        'title': f'{project.name} - Kanban',
        'project': project,
        'board': board,
        'colunas': colunas,
        'form': TaskForm(),
        'is_owner': TaskboardPermissions.is_owner(request.user, project),
    }

    return render(request, 'board/kanban.html', context)


@login_required
@requires_project_access
@require_POST
def create_task(request, project_id):
    """Cria tarefa no fim da coluna escolhida"""
    form = TaskForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='criar tarefa')

    board = store.get_board(request.user, project_id)
    task = store.create_task(
        request.user,
        board.id,
        form.cleaned_data['title'],
        form.cleaned_data['description'],
        form.cleaned_data['status'],
        form.cleaned_data['due_date'],
    )

    return redirecionar(
        request,
        reverse('board:kanban', kwargs={'project_id': project_id}),
        f'Tarefa "{task.title}" criada!'
    )


@login_required
@require_POST
def move_task_ajax(request):
    """
    Move tarefa entre colunas via AJAX
    Usado pelo drag-and-drop

    Corpo JSON: task_id, dest_status, dest_index e opcionalmente source_index.
    Falhas do store viram JSON no StoreFailureMiddleware.
    """
    try:
        data = json.loads(request.body)
    except (TypeError, ValueError):
        raise ValidationFailure('JSON inválido.', step='mover tarefa')

    if not isinstance(data, dict):
        raise ValidationFailure('JSON inválido.', step='mover tarefa')

    dest_status = data.get('dest_status')
    dest_index = data.get('dest_index')

    try:
        task_id = int(data.get('task_id'))
    except (TypeError, ValueError):
        raise ValidationFailure('Parâmetros inválidos.', step='mover tarefa')

    if dest_status is None or dest_index is None:
        raise ValidationFailure('Parâmetros inválidos.', step='mover tarefa')

    task, moved = store.move_task(
        request.user,
        task_id,
        dest_status,
        dest_index,
        data.get('source_index')
    )

    return JsonResponse({
        'success': True,
        'moved': moved,
        'task': {
            'id': task.id,
            'status': task.status,
            'position': task.position,
        },
        'message': f'Tarefa movida para {task.get_status_display()}' if moved else 'Nada mudou'
    })


@login_required
def task_detail_modal(request, task_id):
    """
    Modal com detalhes completos da tarefa
    Inclui comentários em ordem cronológica e membros para atribuição
    """
    comments = store.list_comments(request.user, task_id)
    task = store.get_task(request.user, task_id)
    project = task.board.project
    memberships = store.list_members(request.user, project.id)
    assignee_ids = set(task.assignments.values_list('user_id', flat=True))

    context = {
        'task': task,
        'project': project,
        'comments': comments,
        'memberships': memberships,
        'assignee_ids': assignee_ids,
        'form': TaskForm(initial={
            'title': task.title,
            'description': task.description,
            'status': task.status,
            'due_date': task.due_date,
        }),
        'comment_form': CommentForm(),
        'pode_comentar': TaskboardPermissions.is_task_member(request.user, task),
    }

    return render(request, 'board/task_detail_modal.html', context)


@login_required
@require_POST
def update_task(request, task_id):
    form = TaskForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='atualizar tarefa')

    task = store.update_task(request.user, task_id, form.cleaned_data)

    return redirecionar(
        request,
        reverse('board:kanban', kwargs={'project_id': task.board.project_id}),
        'Tarefa atualizada.'
    )


@login_required
@require_POST
def delete_task(request, task_id):
    task = store.get_task(request.user, task_id)
    project_id = task.board.project_id
    store.delete_task(request.user, task_id)

    return redirecionar(
        request,
        reverse('board:kanban', kwargs={'project_id': project_id}),
        'Tarefa apagada.'
    )


@login_required
@require_POST
def toggle_assignment(request, task_id, user_id):
    """Atribui ou desatribui o membro da tarefa (HTMX ou AJAX)"""
    assigned = store.toggle_assignment(request.user, task_id, user_id)

    response = JsonResponse({'success': True, 'assigned': assigned})
    return trigger_client_event(
        response,
        'toast',
        {'level': 'success', 'message': 'Responsável atribuído' if assigned else 'Atribuição removida'}
    )


@login_required
@require_POST
def add_comment(request, task_id):
    """
    Adiciona comentário a uma tarefa via HTMX
    Retorna o HTML do comentário para ser anexado à lista
    """
    form = CommentForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='comentar')

    comment = store.insert_comment(request.user, task_id, form.cleaned_data['content'])

    context = {
        'comment': comment,
        'user': request.user
    }

    if request.htmx:
        response = render(request, 'board/partials/comment_item.html', context)
        return trigger_client_event(response, 'toast', {'level': 'success', 'message': 'Comentário adicionado'})

    html = render(request, 'board/partials/comment_item.html', context).content.decode()

    return JsonResponse({
        'success': True,
        'html': html,
        'message': 'Comentário adicionado'
    })


@login_required
@require_POST
def edit_comment(request, comment_id):
    form = CommentForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='editar comentário')

    comment = store.update_comment(request.user, comment_id, form.cleaned_data['content'])

    return render(request, 'board/partials/comment_item.html', {'comment': comment, 'user': request.user})


@login_required
@require_POST
def delete_comment(request, comment_id):
    store.delete_comment(request.user, comment_id)

    # HTMX remove o elemento com resposta vazia
    response = HttpResponse('')
    return trigger_client_event(response, 'toast', {'level': 'success', 'message': 'Comentário apagado'})
