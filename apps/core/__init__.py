# apps/core/__init__.py

"""
Core - Aplicação principal do Taskboard

Contém:
- Models (User, Project, Membership, Board, Task, Assignment, Comment)
- Regras puras de consistência do board
- Store com leituras, escritas e fluxos atômicos
- Views de autenticação e painel de projetos
- Comando de verificação de integridade dos boards
"""
