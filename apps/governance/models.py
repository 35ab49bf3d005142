import uuid
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditLog(models.Model):
    """
    Append-only audit trail.

    Admin tasks write one entry per audited run: the action, whether it
    succeeded, and the result or problem description in `details`.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    action = models.CharField(max_length=50, db_index=True, help_text="Action performed (e.g., account.create)")
    target_type = models.CharField(max_length=50, blank=True, help_text="Type of object acted on (e.g., User)")
    target_id = models.CharField(max_length=64, blank=True, help_text="ID of the object acted on")

    # Null for system actors such as admin tasks
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    logged_at = models.DateTimeField(auto_now_add=True, db_index=True)
    details = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    class Meta:
        ordering = ['-logged_at']
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"

    def __str__(self):
        return f"{self.action} on {self.target_type or '-'} by {self.actor or 'system'}"

    @property
    def success(self):
        return bool(self.details.get('success'))
