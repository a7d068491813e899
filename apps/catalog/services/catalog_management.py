"""
Catalog management service.

Handles service CRUD through the gateway. Images are attached in two
phases: the record is written first, then the blob is uploaded and its URL
patched into the record. A failed patch deletes the uploaded blob again.
"""

import logging
import threading
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from apps.catalog.models import PricingMode, Service
from apps.gateway.exceptions import (
    GatewayError,
    OperationCancelledError,
    PersistenceError,
    RecordNotFoundError,
)
from apps.gateway.gateway import gateway
from apps.orders.pricing import is_decimal

from .exceptions import CatalogValidationError, ServiceNotFoundError


logger = logging.getLogger(__name__)


def _validate_name(name: Optional[str]) -> str:
    if name is None or not str(name).strip():
        raise CatalogValidationError("Service name is required")
    return str(name).strip()


def _validate_price(price) -> Decimal:
    if not is_decimal(price):
        raise CatalogValidationError(
            f"Price must be a non-negative number with at most 2 decimals, got {price!r}"
        )
    return Decimal(str(price))


def _validate_mode(pricing_mode: str) -> str:
    if pricing_mode not in PricingMode.values:
        raise CatalogValidationError(f"Unknown pricing mode '{pricing_mode}'")
    return pricing_mode


def _attach_image(service: Service, image, cancel_token) -> Service:
    """Upload ``image`` and patch its URL into ``service``."""
    previous_path = service.image_path

    try:
        blob = gateway.upload_blob(
            f'services/{service.id}/{getattr(image, "name", "image")}',
            image,
            cancel_token=cancel_token,
        )
    except OperationCancelledError:
        logger.info("Image upload for service %s cancelled", service.id)
        return service
    except PersistenceError:
        logger.warning("Image upload for service %s failed, keeping record without image", service.id)
        return service

    try:
        service = gateway.update(
            f'services/{service.id}',
            {'image_ref': blob.url, 'image_path': blob.path},
        )
    except GatewayError:
        logger.error("Could not link image %s to service %s, removing blob", blob.path, service.id)
        _delete_image(blob.path)
        raise

    if previous_path:
        _delete_image(previous_path)
    return service


def _delete_image(path: str) -> None:
    """Best-effort blob removal."""
    try:
        gateway.delete_blob(path)
    except GatewayError as e:
        logger.warning("Failed to delete image %s: %s", path, e)


def create_service(
    *,
    name: str,
    price,
    pricing_mode: str = PricingMode.PER_UNIT,
    image=None,
    cancel_token: Optional[threading.Event] = None,
) -> Service:
    """
    Create a catalog entry.

    Args:
        name: Display name (required)
        price: Unit price or price per square meter
        pricing_mode: perUnit or perArea
        image: Optional uploaded file
        cancel_token: Optional event that abandons the image upload

    Returns:
        Created Service instance. If the image upload fails or is cancelled
        the service is returned without an image.

    Raises:
        CatalogValidationError: If name, price or mode is invalid
        PersistenceError: If the record cannot be written
    """
    fields = {
        'name': _validate_name(name),
        'price': _validate_price(price),
        'pricing_mode': _validate_mode(pricing_mode),
    }

    service = gateway.write('services', fields)
    logger.info("Created service %s (%s)", service.id, service.name)

    if image is not None:
        service = _attach_image(service, image, cancel_token)
    return service


def get_service(*, service_id: UUID) -> Service:
    try:
        return gateway.get(f'services/{service_id}')
    except RecordNotFoundError:
        raise ServiceNotFoundError(f"Service {service_id} not found")


def update_service(
    *,
    service_id: UUID,
    name: Optional[str] = None,
    price=None,
    pricing_mode: Optional[str] = None,
    image=None,
    cancel_token: Optional[threading.Event] = None,
) -> Service:
    """
    Partially update a catalog entry.

    Only the given fields change. A new image replaces the old one, which is
    then deleted best-effort.

    Raises:
        ServiceNotFoundError: If service doesn't exist
        CatalogValidationError: If a given field is invalid
    """
    fields = {}
    if name is not None:
        fields['name'] = _validate_name(name)
    if price is not None:
        fields['price'] = _validate_price(price)
    if pricing_mode is not None:
        fields['pricing_mode'] = _validate_mode(pricing_mode)

    service = get_service(service_id=service_id)

    if fields:
        try:
            service = gateway.update(f'services/{service_id}', fields)
        except RecordNotFoundError:
            raise ServiceNotFoundError(f"Service {service_id} not found")

    if image is not None:
        service = _attach_image(service, image, cancel_token)
    return service


def delete_service(*, service_id: UUID) -> None:
    """
    Remove a catalog entry and, best-effort, its image.

    Line items already on orders keep their snapshot of the service.

    Raises:
        ServiceNotFoundError: If service doesn't exist
    """
    service = get_service(service_id=service_id)
    image_path = service.image_path

    gateway.remove(f'services/{service_id}')
    logger.info("Deleted service %s", service_id)

    if image_path:
        _delete_image(image_path)


def list_services() -> List[Service]:
    return list(Service.objects.all())
