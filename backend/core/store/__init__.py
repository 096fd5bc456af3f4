from django.conf import settings
from django.utils.module_loading import import_string

from .base import BookingStore

_instances: dict[str, BookingStore] = {}


def get_store() -> BookingStore:
    """Return the configured store, instantiating it once per backend path."""
    path = settings.BOOKING_STORE_BACKEND
    store = _instances.get(path)
    if store is None:
        store = import_string(path)()
        _instances[path] = store
    return store
