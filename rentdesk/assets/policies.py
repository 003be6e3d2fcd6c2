"""Upload policies for each kind of asset-bearing record."""

from __future__ import annotations

import re
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING

from rentdesk.assets.types import UploadOptions
from rentdesk.lib.storage.base import Bucket

if TYPE_CHECKING:
    from rentdesk.config import AssetPolicyOverride

IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
CUSTOMER_ID_PATTERN = re.compile(r"[A-Za-z0-9-]+")


class AssetKind(str, Enum):
    VEHICLE = "vehicle"
    CAMPAIGN = "campaign"
    DOCUMENT = "document"


POLICIES: dict[AssetKind, UploadOptions] = {
    AssetKind.VEHICLE: UploadOptions(
        bucket=Bucket.VEHICLE_IMAGES,
        folder="vehicles",
        max_size_mb=5,
        allowed_types=IMAGE_TYPES,
    ),
    AssetKind.CAMPAIGN: UploadOptions(
        bucket=Bucket.CAMPAIGN_IMAGES,
        folder="campaigns",
        max_size_mb=5,
        allowed_types=IMAGE_TYPES,
    ),
    AssetKind.DOCUMENT: UploadOptions(
        bucket=Bucket.DOCUMENTS,
        max_size_mb=10,
        allowed_types=("application/pdf", *IMAGE_TYPES),
    ),
}


class CustomerIdError(ValueError):
    """Raised when a document policy gets no usable customer id."""


class MissingCustomerError(CustomerIdError):
    """Raised when a document policy is requested without a customer id."""


class InvalidCustomerError(CustomerIdError):
    """Raised when a customer id would not make a single folder name."""


def policy_for(
    kind: AssetKind | str,
    customer_id: str | None = None,
    overrides: dict[str, AssetPolicyOverride] | None = None,
) -> UploadOptions:
    """Return the upload options for ``kind``.

    Documents are filed per customer under ``customer-<customer_id>``.
    ``overrides`` (from the ``assets`` config section) can change the size
    limit or the allowed types of any kind.
    """
    kind = AssetKind(kind)
    options = POLICIES[kind]

    if kind is AssetKind.DOCUMENT:
        if not customer_id:
            raise MissingCustomerError("A customer id is required to file a document")
        if not CUSTOMER_ID_PATTERN.fullmatch(customer_id):
            raise InvalidCustomerError(f"Invalid customer id: {customer_id!r}")
        options = replace(options, folder=f"customer-{customer_id}")

    override = (overrides or {}).get(kind.value)
    if override is not None:
        if override.max_size_mb is not None:
            options = replace(options, max_size_mb=override.max_size_mb)
        if override.allowed_types is not None:
            options = replace(options, allowed_types=tuple(override.allowed_types))

    return options
