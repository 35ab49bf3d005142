"""Convert task results into plain printable / JSON-storable structures.

Model instances and querysets are read here, so callers inside an event loop
must go through sync_to_async.
"""
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass

from django.db.models import Model, QuerySet
from django.forms.models import model_to_dict
from pydantic import BaseModel


# Never printed or written to the audit trail
SENSITIVE_FIELDS = ('password',)


def serialize(value):
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # ninja Schema is a pydantic model
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Model):
        return _serialize_instance(value)
    if isinstance(value, QuerySet):
        return [serialize(item) for item in value]
    if is_dataclass(value) and not isinstance(value, type):
        return serialize(asdict(value))
    if isinstance(value, Mapping):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize(item) for item in value]
    return value


def _serialize_instance(instance: Model) -> dict:
    data = model_to_dict(instance, exclude=SENSITIVE_FIELDS)
    data.setdefault('id', instance.pk)
    for key, item in data.items():
        # many-to-many fields come back as lists of related instances
        if isinstance(item, list):
            data[key] = [related.pk if isinstance(related, Model) else related for related in item]
    return {key: serialize(item) for key, item in data.items()}
