# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTENTICAÇÃO ===
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('signup/', views.signup_view, name='signup'),

    # === PAINEL PRINCIPAL ===
    path('', views.dashboard, name='dashboard'),

    # === PROJETOS ===
    path('projects/create/', views.create_project, name='create_project'),
    path('projects/<int:project_id>/edit/', views.update_project, name='update_project'),
    path('projects/<int:project_id>/delete/', views.delete_project, name='delete_project'),

    # === MEMBROS ===
    path('projects/<int:project_id>/members/', views.project_members, name='project_members'),
    path('projects/<int:project_id>/members/<int:user_id>/remove/', views.remove_member, name='remove_member'),

    # === MONITORAMENTO ===
    path('health/', views.health_check, name='health'),
]
