"""Upload authorization endpoint for direct-to-storage uploads."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException

from transcribe_api.dependencies import get_upload_authorizer
from transcribe_api.exceptions import AuthorizationDenied
from transcribe_api.handlers import UploadAuthorizer
from transcribe_api.logging import setup_logging
from transcribe_api.response_models import UploadCompletedResponse, UploadTokenResponse

logger = setup_logging()

router = APIRouter(prefix="/api", tags=["upload"])

GENERATE_TOKEN = "blob.generate-client-token"
UPLOAD_COMPLETED = "blob.upload-completed"

AuthorizerDep = Annotated[UploadAuthorizer, Depends(get_upload_authorizer)]


@router.post(
    "/upload", response_model=UploadTokenResponse | UploadCompletedResponse
)
def handle_upload(
    body: Annotated[dict[str, Any], Body()],
    authorizer: AuthorizerDep,
) -> UploadTokenResponse | UploadCompletedResponse:
    """
    Handles the two-step upload handshake.

    "blob.generate-client-token" returns a presigned POST policy for one
    object; "blob.upload-completed" acknowledges a finished upload.
    """
    event_type = body.get("type")
    payload = body.get("payload")

    if event_type == GENERATE_TOKEN:
        try:
            authorization = authorizer.authorize(payload)
        except AuthorizationDenied as e:
            logger.warning("Upload token denied", extra={"reason": e.message})
            raise HTTPException(status_code=400, detail=e.message)

        return UploadTokenResponse(
            upload_url=authorization.issued_token.upload_url,
            form_fields=authorization.issued_token.form_fields,
            object_url=authorization.object_url,
            allowed_content_types=list(authorization.allowed_content_types),
            maximum_size_in_bytes=authorization.max_bytes,
        )

    if event_type == UPLOAD_COMPLETED:
        blob = payload.get("blob") if isinstance(payload, dict) else None
        logger.info(
            "Upload completed",
            extra={"blob_url": blob.get("url") if isinstance(blob, dict) else None},
        )
        return UploadCompletedResponse()

    raise HTTPException(
        status_code=400, detail=f"Unsupported upload event '{event_type}'"
    )
