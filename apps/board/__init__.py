# apps/board/__init__.py

"""
Board - Aplicação Kanban do Taskboard

Funcionalidades:
- Interface Kanban drag-and-drop (uma coluna por status)
- HTMX para interações dinâmicas
- Detalhes da tarefa, atribuições e comentários
"""
