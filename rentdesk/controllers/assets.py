"""JSON endpoints the dashboard forms use to manage record files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from litestar import Controller, Request, delete, post
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.exceptions import HTTPException, NotFoundException
from litestar.params import Body
from litestar.response import Response
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_502_BAD_GATEWAY,
)

from rentdesk.assets.lifecycle import AssetLifecycle
from rentdesk.assets.policies import POLICIES, AssetKind, CustomerIdError, policy_for
from rentdesk.assets.types import AssetFile, UploadOptions


@dataclass
class AssetUploadForm:
    file: UploadFile
    current_url: str | None = None
    customer_id: str | None = None


def _asset_kind(kind: str) -> AssetKind:
    try:
        return AssetKind(kind)
    except ValueError:
        raise NotFoundException(f"Unknown asset kind: {kind}")


def _resolve_policy(request: Request, kind: str, customer_id: str | None) -> UploadOptions:
    asset_kind = _asset_kind(kind)
    try:
        return policy_for(asset_kind, customer_id, request.app.state.asset_policies)
    except CustomerIdError as exc:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=str(exc))


class AssetController(Controller):
    """Upload, replace, and delete the file attached to a record."""

    path = "/api/assets"

    @post("/{kind:str}")
    async def upload_asset(
        self,
        request: Request,
        kind: str,
        data: Annotated[AssetUploadForm, Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> Response:
        """Store a new file, replacing ``current_url`` when the record already has one."""
        options = _resolve_policy(request, kind, data.customer_id)
        lifecycle: AssetLifecycle = request.app.state.asset_lifecycle

        file = AssetFile(
            filename=data.file.filename or "untitled",
            content_type=data.file.content_type or "application/octet-stream",
            data=await data.file.read(),
        )

        if data.current_url:
            result = await lifecycle.replace(data.current_url, file, options)
        else:
            result = await lifecycle.upload(file, options)

        return Response(
            content=result.to_dict(),
            status_code=HTTP_201_CREATED if result.success else HTTP_400_BAD_REQUEST,
            media_type="application/json",
        )

    @delete("/{kind:str}", status_code=HTTP_200_OK)
    async def delete_asset(self, request: Request, kind: str, url: str) -> Response:
        """Remove the stored file behind ``url``; unknown URLs are a no-op."""
        bucket = POLICIES[_asset_kind(kind)].bucket
        lifecycle: AssetLifecycle = request.app.state.asset_lifecycle

        result = await lifecycle.delete(bucket, url)
        return Response(
            content=result.to_dict(),
            status_code=HTTP_200_OK if result.success else HTTP_502_BAD_GATEWAY,
            media_type="application/json",
        )
