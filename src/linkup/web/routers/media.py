from fastapi import APIRouter, UploadFile
from fastapi.responses import FileResponse

from linkup.core.modules.media.models import UploadedFile
from linkup.web.deps import AppDep, AuthContextDep
from linkup.web.openapi import ERROR_RESPONSES
from linkup.web.responses import SuccessResponse, success

router = APIRouter(prefix="/media", tags=["media"])


@router.post(
    "/upload",
    summary="Upload file",
    description="Upload an image or document (jpeg, jpg, png, gif, pdf, doc, docx, txt; at most 10MB).",
    operation_id="uploadMedia",
    responses=ERROR_RESPONSES,
)
async def upload_media(file: UploadFile, app: AppDep, ctx: AuthContextDep) -> SuccessResponse[UploadedFile]:
    content = await file.read()
    filename = file.filename or "unnamed"
    mime_type = file.content_type or "application/octet-stream"
    uploaded = await app.upload_media(ctx, filename, content, mime_type)
    return success(uploaded, "File uploaded successfully")


@router.get(
    "/{name}",
    summary="Download file",
    description="Download a previously uploaded file by its stored name.",
    operation_id="downloadMedia",
    response_class=FileResponse,
    responses=ERROR_RESPONSES,
)
async def download_media(name: str, app: AppDep, ctx: AuthContextDep) -> FileResponse:
    info = await app.get_media_file(ctx, name)
    return FileResponse(path=info.file_path, filename=info.filename)
