# apps/core/signals.py

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Membership, Task

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Membership)
def registrar_novo_membro(sender, instance, created, **kwargs):
    """Registra em log quando alguém entra em um projeto"""
    if created:
        logger.info(
            f"👥 {instance.user.username} entrou no projeto {instance.project_id} "
            f"como {instance.role}"
        )


@receiver(pre_save, sender=Task)
def registrar_conclusao(sender, instance, **kwargs):
    """
    Registra quando uma tarefa passa para "done"
    """
    if not instance.pk or instance.status != Task.Status.DONE:
        return

    status_anterior = sender.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    if status_anterior is not None and status_anterior != Task.Status.DONE:
        logger.info(f"✅ Tarefa '{instance.title}' foi concluída")
