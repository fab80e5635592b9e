from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse
from coursedesk.api.deps import get_material_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import material as schemas
from coursedesk.services.guard import Identity
from coursedesk.services.material_service import MaterialService

router = APIRouter()

@router.post("", response_model=schemas.Material)
def create_material(
    material_in: schemas.MaterialCreate,
    identity: Identity = Depends(get_identity),
    service: MaterialService = Depends(get_material_service),
):
    return service.create_material(identity, material_in)

@router.post("/upload", response_model=schemas.Material)
async def upload_material(
    course_id: str = Form(..., alias="courseId"),
    title: str = Form(...),
    file: UploadFile = File(...),
    identity: Identity = Depends(get_identity),
    service: MaterialService = Depends(get_material_service),
):
    content = await file.read()
    return service.upload_material(identity, course_id, title, file.filename or "", content, file.content_type)

@router.get("/files/{path:path}")
def get_material_file(
    path: str,
    download: bool = False,
    identity: Identity = Depends(get_identity),
    service: MaterialService = Depends(get_material_service),
):
    response = service.open_material_file(identity, path)

    # Stored names are "<uuid>_<original filename>"
    filename = path.split("/")[-1]
    if "_" in filename:
        filename = filename.split("_", 1)[1]

    disposition = "attachment" if download else "inline"
    headers = {
        "Content-Disposition": f'{disposition}; filename="{filename}"'
    }
    return StreamingResponse(
        response.stream(32 * 1024),
        media_type=response.headers.get('content-type'),
        headers=headers
    )
