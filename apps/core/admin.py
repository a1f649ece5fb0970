# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from django.utils import timezone
from .models import User, Project, Membership, Board, Task, Assignment, Comment
from .utils import resumir_texto


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin customizado para o modelo User"""

    list_display = [
        'username', 'email', 'display_name', 'is_active', 'date_joined'
    ]
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'display_name', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    # Adicionar campos customizados ao formulário
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Perfil', {
            'fields': ('display_name', 'avatar_url')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Perfil', {
            'fields': ('display_name',)
        }),
    )


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin para gerenciamento de projetos"""

    list_display = ['name', 'owner', 'membros_count', 'boards_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'owner__username']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [MembershipInline]

    fieldsets = (
        ('Informações Básicas', {
            'fields': ('name', 'description', 'owner')
        }),
        ('Datas', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def membros_count(self, obj):
        """Conta quantidade de membros"""
        return obj.memberships.count()

    membros_count.short_description = 'Membros'

    def boards_count(self, obj):
        """Conta quantidade de boards"""
        return obj.boards.count()

    boards_count.short_description = 'Boards'


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ['user', 'project', 'role', 'joined_at']
    list_filter = ['role']
    search_fields = ['user__username', 'project__name']


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin para boards Kanban"""

    list_display = ['name', 'project', 'position', 'tasks_count', 'created_at']
    list_filter = ['created_at', 'project']
    search_fields = ['name', 'description', 'project__name']
    readonly_fields = ['created_at', 'updated_at']

    def tasks_count(self, obj):
        return obj.tasks.count()

    tasks_count.short_description = 'Tarefas'


class AssignmentInline(admin.TabularInline):
    model = Assignment
    extra = 0
    fields = ['user', 'assigned_at']
    readonly_fields = ['assigned_at']


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ['author', 'content', 'created_at']
    readonly_fields = ['created_at']

    def has_add_permission(self, request, obj=None):
        """Apenas leitura no admin"""
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin para tarefas"""

    list_display = ['id', 'title', 'board', 'status', 'position', 'status_prazo', 'created_by']
    list_filter = ['status', 'board__project', 'created_at']
    search_fields = ['title', 'description']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'updated_at', 'created_by']
    ordering = ['board', 'status', 'position']
    inlines = [AssignmentInline, CommentInline]

    def status_prazo(self, obj):
        """Status do prazo"""
        if not obj.due_date:
            return '-'

        if obj.status == Task.Status.DONE:
            return format_html('<span style="color: green;">✓ Concluído</span>')

        if obj.is_overdue():
            dias = (timezone.now() - obj.due_date).days
            return format_html('<span style="color: red;">⚠️ Atrasado {} dias</span>', dias)

        return f"Em {(obj.due_date - timezone.now()).days} dias"

    status_prazo.short_description = 'Prazo'


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    """Admin para comentários"""

    list_display = ['author', 'task', 'texto_resumo', 'created_at']
    list_filter = ['created_at']
    search_fields = ['content', 'author__username']
    readonly_fields = ['created_at', 'updated_at']

    def texto_resumo(self, obj):
        return resumir_texto(obj.content)

    texto_resumo.short_description = 'Comentário'


# Configuração do site admin
admin.site.site_header = "Taskboard - Administração"
admin.site.site_title = "Taskboard Admin"
admin.site.index_title = "Painel Administrativo"
