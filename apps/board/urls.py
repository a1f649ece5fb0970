# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Kanban principal
    path('project/<int:project_id>/', views.board_kanban_view, name='kanban'),

    # Criação de tarefas
    path('project/<int:project_id>/tasks/create/', views.create_task, name='create_task'),

    # AJAX - Drag & drop
    path('tasks/move/', views.move_task_ajax, name='move_task'),

    # Detalhes e edição
    path('tasks/<int:task_id>/', views.task_detail_modal, name='task_detail'),
    path('tasks/<int:task_id>/update/', views.update_task, name='update_task'),
    path('tasks/<int:task_id>/delete/', views.delete_task, name='delete_task'),

    # Atribuições
    path('tasks/<int:task_id>/assign/<int:user_id>/', views.toggle_assignment, name='toggle_assignment'),

    # Comentários
    path('tasks/<int:task_id>/comments/', views.add_comment, name='add_comment'),
    path('comments/<int:comment_id>/edit/', views.edit_comment, name='edit_comment'),
    path('comments/<int:comment_id>/delete/', views.delete_comment, name='delete_comment'),
]
