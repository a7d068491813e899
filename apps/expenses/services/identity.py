"""
Device identity service.

Staff are attributed by the push token of the device they use. The key of a
token is the text inside its first pair of brackets
(``ExponentPushToken[abc]`` -> ``abc``), or the whole token otherwise.
"""

import logging
import re
from typing import Optional

from apps.expenses.models import DeviceIdentity
from apps.gateway.exceptions import RecordNotFoundError
from apps.gateway.gateway import gateway

from .exceptions import ExpenseValidationError, MissingDeviceTokenError


logger = logging.getLogger(__name__)

DEVICE_KEY_PATTERN = re.compile(r'\[(.*?)\]')


def extract_device_key(device_token: str) -> str:
    """
    Stable key for a device push token.

    Raises:
        MissingDeviceTokenError: If the token is empty
    """
    if not device_token or not str(device_token).strip():
        raise MissingDeviceTokenError("A device token is required")
    token = str(device_token).strip()
    match = DEVICE_KEY_PATTERN.search(token)
    if match and match.group(1):
        return match.group(1)
    return token


def resolve_identity(device_token: str) -> Optional[DeviceIdentity]:
    """Registered identity of the device, or None for a fresh device."""
    key = extract_device_key(device_token)
    try:
        return gateway.get(f'admins/{key}')
    except RecordNotFoundError:
        return None


def register_identity(device_token: str, name: str) -> DeviceIdentity:
    """
    Store ``name`` as the display name of the device.

    Raises:
        ExpenseValidationError: If the name is empty
    """
    if not name or not str(name).strip():
        raise ExpenseValidationError("Reporter name is required")
    key = extract_device_key(device_token)
    identity = gateway.write(
        f'admins/{key}',
        {'name': str(name).strip(), 'full_token': str(device_token).strip()},
    )
    logger.info("Registered device identity %s as %s", key, identity.name)
    return identity
