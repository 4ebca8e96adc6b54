"""
Asset delivery.

GET /assets/{path} - Serve a cover image by its public reference path

References are "{ASSET_PUBLIC_BASE_URL}/{namespace}/{name}{ext}"; with the
default base URL they resolve here, whichever provider holds the bytes.
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from postdesk.storage.assets import AssetStore
from postdesk.storage.factory import get_asset_store

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("/{asset_path:path}")
def get_asset(
    asset_path: str,
    assets: AssetStore = Depends(get_asset_store),
) -> Response:
    identifier = assets.identifier_for(f"{assets.codec.base_url}/{asset_path}")
    if identifier is None:
        raise HTTPException(status_code=404, detail="Asset not found")

    stored = assets.open(identifier)
    if stored is None:
        raise HTTPException(status_code=404, detail="Asset not found")

    return Response(
        content=stored.content,
        media_type=stored.metadata.content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
