"""
Remote data gateway.
====================

Keyed-collection facade over the relational store and the file storage.

Collections are addressed by path (``services``, ``costs``, ``admins``,
``orders/active``, ``orders/delivered``, ``orders/deleted``) and single
records by ``<collection>/<key>``. Reads return JSON-like records built by
each model's ``to_record()``.

Subscribers get the full keyed map of a collection once on subscribe and
again after every committed change to the backing model. Delivery happens
in ``transaction.on_commit`` so observers never see uncommitted data.

Transient database and storage failures are retried with exponential
backoff (``GATEWAY_MAX_RETRIES`` / ``GATEWAY_RETRY_BACKOFF``) before being
reported as ``PersistenceError``.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from django.apps import apps as django_apps
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile, File
from django.core.files.storage import default_storage
from django.db import DatabaseError, InterfaceError, OperationalError, transaction
from django.db.models.signals import post_delete, post_save

from .exceptions import (
    OperationCancelledError,
    PersistenceError,
    RecordNotFoundError,
    UnknownCollectionError,
)


logger = logging.getLogger(__name__)


class Collection(NamedTuple):
    """Registry entry mapping a collection path onto a model."""
    model_label: str
    filters: Dict[str, Any] = {}
    key_field: str = 'pk'
    prefetch: tuple = ()


COLLECTIONS: Dict[str, Collection] = {
    'services': Collection('catalog.Service'),
    'costs': Collection('expenses.Cost'),
    'admins': Collection('expenses.DeviceIdentity', key_field='key'),
    'orders/active': Collection(
        'orders.Order', {'partition': 'active'}, prefetch=('line_items',)
    ),
    'orders/delivered': Collection(
        'orders.Order', {'partition': 'delivered'}, prefetch=('line_items',)
    ),
    'orders/deleted': Collection(
        'orders.Order', {'partition': 'deleted'}, prefetch=('line_items',)
    ),
}

TRANSIENT_ERRORS = (OperationalError, InterfaceError, OSError)


class StoredBlob(NamedTuple):
    path: str
    url: str


class Subscription:
    """Handle returned by ``subscribe``; ``cancel()`` stops further deliveries."""

    def __init__(self, gateway: 'RemoteDataGateway', path: str, callback: Callable):
        self._gateway = gateway
        self.path = path
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._gateway._unsubscribe(self)
            self.active = False


class RemoteDataGateway:
    """
    Persistence gateway for every app in the project.

    A single module-level instance (``gateway``) is wired to model signals
    by ``GatewayConfig.ready``. Tests may build private instances.
    """

    def __init__(self, collections: Optional[Dict[str, Collection]] = None):
        self.collections = dict(collections or COLLECTIONS)
        self._subscribers: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # Path resolution
    # =========================================================================

    def _split(self, path: str):
        """Split ``<collection>/<key>`` into its parts, longest collection first."""
        path = path.strip('/')
        if path in self.collections:
            return path, None
        for collection in sorted(self.collections, key=len, reverse=True):
            prefix = f'{collection}/'
            if path.startswith(prefix) and len(path) > len(prefix):
                return collection, path[len(prefix):]
        raise UnknownCollectionError(f"Unknown collection path '{path}'")

    def _model(self, collection: str):
        return django_apps.get_model(self.collections[collection].model_label)

    def _queryset(self, collection: str):
        entry = self.collections[collection]
        queryset = self._model(collection).objects.filter(**entry.filters)
        if entry.prefetch:
            queryset = queryset.prefetch_related(*entry.prefetch)
        return queryset

    def _record_key(self, collection: str, instance) -> str:
        return str(getattr(instance, self.collections[collection].key_field))

    # =========================================================================
    # Retry
    # =========================================================================

    def execute(self, operation: Callable[[], Any], description: str = 'operation'):
        """
        Run ``operation`` with retry on transient failures.

        Each attempt should open its own transaction. Domain exceptions
        raised by ``operation`` propagate unchanged.

        Raises:
            PersistenceError: If every attempt fails, or on a non-transient
                database error.
        """
        max_retries = max(1, settings.GATEWAY_MAX_RETRIES)
        backoff = settings.GATEWAY_RETRY_BACKOFF

        for attempt in range(max_retries):
            try:
                return operation()
            except TRANSIENT_ERRORS as e:
                if attempt == max_retries - 1:
                    logger.error(
                        "%s failed after %d attempts: %s", description, max_retries, e
                    )
                    raise PersistenceError(f"Failed to {description}") from e
                logger.warning(
                    "%s failed (attempt %d/%d), retrying: %s",
                    description, attempt + 1, max_retries, e,
                )
                time.sleep(backoff * (2 ** attempt))
            except DatabaseError as e:
                logger.error("%s failed: %s", description, e)
                raise PersistenceError(f"Failed to {description}") from e

    # =========================================================================
    # Reads
    # =========================================================================

    def snapshot(self, path: str) -> Dict[str, dict]:
        """Return the keyed map of records currently in a collection."""
        collection, key = self._split(path)
        if key is not None:
            raise UnknownCollectionError(f"'{path}' is a record path, not a collection")

        def _read():
            return {
                self._record_key(collection, instance): instance.to_record()
                for instance in self._queryset(collection)
            }

        return self.execute(_read, description=f'read {collection}')

    def get(self, path: str):
        """Return the model instance stored at ``<collection>/<key>``."""
        collection, key = self._split(path)
        if key is None:
            raise UnknownCollectionError(f"'{path}' is a collection, not a record path")
        lookup = {self.collections[collection].key_field: key}

        def _read():
            try:
                return self._queryset(collection).get(**lookup)
            except (self._model(collection).DoesNotExist, ValueError, ValidationError):
                raise RecordNotFoundError(f"No record at '{path}'")

        return self.execute(_read, description=f'read {path}')

    # =========================================================================
    # Writes
    # =========================================================================

    def write(self, path: str, value: Dict[str, Any]):
        """
        Create or replace a record.

        A collection path creates a new record with a generated key; a record
        path creates or overwrites the record with that key.

        Returns:
            The saved model instance.
        """
        collection, key = self._split(path)
        entry = self.collections[collection]
        model = self._model(collection)
        fields = {**entry.filters, **value}

        def _write():
            with transaction.atomic():
                if key is None:
                    return model.objects.create(**fields)
                instance, _ = model.objects.update_or_create(
                    **{entry.key_field: key}, defaults=fields
                )
                return instance

        return self.execute(_write, description=f'write {path}')

    def update(self, path: str, fields: Dict[str, Any]):
        """
        Patch named fields of an existing record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        collection, key = self._split(path)
        if key is None:
            raise UnknownCollectionError(f"'{path}' is a collection, not a record path")
        lookup = {self.collections[collection].key_field: key}

        def _update():
            with transaction.atomic():
                instance = self._locked(collection, lookup, path)
                for name, field_value in fields.items():
                    setattr(instance, name, field_value)
                update_fields = list(fields)
                if any(f.name == 'updated_at' for f in instance._meta.fields):
                    update_fields.append('updated_at')
                instance.save(update_fields=update_fields)
                return instance

        return self.execute(_update, description=f'update {path}')

    def remove(self, path: str) -> bool:
        """Delete a record. Returns False when nothing was stored at ``path``."""
        collection, key = self._split(path)
        if key is None:
            raise UnknownCollectionError(f"'{path}' is a collection, not a record path")
        lookup = {self.collections[collection].key_field: key}

        def _remove():
            with transaction.atomic():
                try:
                    instance = self._locked(collection, lookup, path)
                except RecordNotFoundError:
                    return False
                instance.delete()
                return True

        return self.execute(_remove, description=f'remove {path}')

    def _locked(self, collection: str, lookup: dict, path: str):
        model = self._model(collection)
        try:
            return self._queryset(collection).select_for_update().get(**lookup)
        except (model.DoesNotExist, ValueError, ValidationError):
            raise RecordNotFoundError(f"No record at '{path}'")

    # =========================================================================
    # Blobs
    # =========================================================================

    def upload_blob(
        self,
        path: str,
        content,
        cancel_token: Optional[threading.Event] = None,
    ) -> StoredBlob:
        """
        Store a binary object and return its storage path and public URL.

        Args:
            path: Requested storage key (the storage may alter it to avoid
                collisions; use the returned path for deletion).
            content: A Django ``File`` or raw bytes.
            cancel_token: Optional event; when set the upload is abandoned.

        Raises:
            OperationCancelledError: If the token is set before the write, or
                becomes set while it runs (the stored blob is removed).
            PersistenceError: If the storage keeps failing.
        """
        if cancel_token is not None and cancel_token.is_set():
            raise OperationCancelledError(f"Upload of '{path}' cancelled")

        if not isinstance(content, File):
            content = ContentFile(content)

        def _save():
            if hasattr(content, 'seek'):
                content.seek(0)
            return default_storage.save(path, content)

        stored_path = self.execute(_save, description=f'upload {path}')

        if cancel_token is not None and cancel_token.is_set():
            self.delete_blob(stored_path)
            raise OperationCancelledError(f"Upload of '{path}' cancelled")

        logger.info("Stored blob %s", stored_path)
        return StoredBlob(path=stored_path, url=default_storage.url(stored_path))

    def delete_blob(self, path: str) -> None:
        """Delete a stored binary object. Missing blobs are ignored."""
        self.execute(
            lambda: default_storage.delete(path),
            description=f'delete blob {path}',
        )

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, path: str, on_snapshot: Callable[[Dict[str, dict]], None]) -> Subscription:
        """
        Register a callback for a collection.

        The callback receives the current keyed map immediately and again
        after each committed change.
        """
        collection, key = self._split(path)
        if key is not None:
            raise UnknownCollectionError(f"Cannot subscribe to record path '{path}'")

        subscription = Subscription(self, collection, on_snapshot)
        with self._lock:
            self._subscribers.setdefault(collection, []).append(subscription)

        on_snapshot(self.snapshot(collection))
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.path, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def publish(self, collection: str) -> None:
        """Deliver the current snapshot of ``collection`` to its subscribers."""
        with self._lock:
            subscribers = list(self._subscribers.get(collection, []))
        if not subscribers:
            return

        records = self.snapshot(collection)
        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                subscription.callback(records)
            except Exception:
                logger.exception("Subscriber callback for %s failed", collection)

    def collections_for(self, model) -> List[str]:
        label = model._meta.label
        return [
            path for path, entry in self.collections.items()
            if entry.model_label == label
        ]

    def notify_changed(self, model) -> None:
        """Schedule a publish of every collection backed by ``model`` after commit."""
        for collection in self.collections_for(model):
            transaction.on_commit(lambda c=collection: self.publish(c))

    def _handle_model_change(self, sender, **kwargs):
        self.notify_changed(sender)

    def connect_signals(self) -> None:
        """Publish snapshots whenever a registered model is saved or deleted."""
        labels = {entry.model_label for entry in self.collections.values()}
        for label in labels:
            model = django_apps.get_model(label)
            dispatch_uid = f'gateway-{id(self)}-{label}'
            post_save.connect(
                self._handle_model_change, sender=model,
                weak=False, dispatch_uid=f'{dispatch_uid}-save',
            )
            post_delete.connect(
                self._handle_model_change, sender=model,
                weak=False, dispatch_uid=f'{dispatch_uid}-delete',
            )


gateway = RemoteDataGateway()
