# apps/__init__.py

"""
Taskboard - Aplicações Django

Este pacote contém as aplicações do sistema:
- core: Models, regras de consistência do board, serviços e permissões
- board: Views do Kanban, detalhes da tarefa e comentários
"""

__version__ = '0.1.0'
__author__ = 'Equipe Taskboard'
