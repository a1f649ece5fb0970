#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Taskboard - Projetos e tarefas em Kanban
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # Configuração padrão para desenvolvimento
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Comandos customizados do Taskboard
    if len(sys.argv) > 1 and sys.argv[1] == 'setup':
        print("🚀 Configurando Taskboard...")

        # Executar migrações
        print("📊 Aplicando migrações...")
        execute_from_command_line([sys.argv[0], 'migrate'])

        # Coletar arquivos estáticos
        print("📁 Coletando arquivos estáticos...")
        execute_from_command_line([sys.argv[0], 'collectstatic', '--noinput'])

        # Verificar consistência dos boards existentes
        print("🔍 Verificando integridade...")
        execute_from_command_line([sys.argv[0], 'check_board_integrity'])

        print("✅ Setup concluído!")
        return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
