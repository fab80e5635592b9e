import io
import logging
import mimetypes
import os
import uuid
from typing import List, Optional

from coursedesk.core import minio_client
from coursedesk.core.config import settings
from coursedesk.core.exceptions import NotFoundException, ValidationException
from coursedesk.models import postgresql as models
from coursedesk.schemas import material as schemas
from coursedesk.services.guard import Identity, require_course_access, require_course_owner
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq

logger = logging.getLogger(__name__)

FILES_ROUTE = "/api/v1/materials/files/"


def file_type_for(filename: str, content_type: Optional[str]) -> str:
    extension = os.path.splitext(filename)[1].lstrip(".").lower()
    if extension:
        return extension
    guessed = mimetypes.guess_extension(content_type or "") or ""
    return guessed.lstrip(".") or "file"


class MaterialService:
    def __init__(self, store: EntityStore):
        self.store = store

    def list_course_materials(self, identity: Optional[Identity], course_id: str) -> List[models.Material]:
        course = require_course_access(self.store, identity, course_id)
        return self.store.find(models.Material, eq("course_id", course.id), order_by="-uploaded_at")

    def create_material(self, identity: Optional[Identity], material_in: schemas.MaterialCreate) -> models.Material:
        course = require_course_owner(self.store, identity, material_in.course_id)
        material = self.store.insert(models.Material, {**material_in.model_dump(), "course_id": course.id})
        logger.info("Material %s added to course %s", material.id, course.id)
        return material

    def upload_material(
        self,
        identity: Optional[Identity],
        course_id: str,
        title: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> models.Material:
        course = require_course_owner(self.store, identity, course_id)
        if not filename:
            raise ValidationException(detail="A file is required")

        object_name = f"materials/{course.id}/{uuid.uuid4()}_{os.path.basename(filename)}"
        minio_client.get_minio_client().put_object(
            settings.MINIO_BUCKET_MATERIALS, object_name,
            data=io.BytesIO(content),
            length=len(content),
            content_type=content_type or "application/octet-stream",
        )

        material = self.store.insert(models.Material, {
            "course_id": course.id,
            "title": title,
            "file_url": f"{FILES_ROUTE}{object_name}",
            "file_type": file_type_for(filename, content_type),
        })
        logger.info("Uploaded %s for material %s", object_name, material.id)
        return material

    def open_material_file(self, identity: Optional[Identity], path: str):
        """Return the stored object for ``path`` after checking course access.

        Object names are ``materials/<course id>/<uuid>_<filename>``.
        """
        parts = path.split("/")
        if len(parts) != 3 or parts[0] != "materials":
            raise NotFoundException(detail="File not found")
        require_course_access(self.store, identity, parts[1])
        if not self.store.exists(models.Material, eq("file_url", f"{FILES_ROUTE}{path}")):
            raise NotFoundException(detail="File not found")
        return minio_client.get_minio_client().get_object(settings.MINIO_BUCKET_MATERIALS, path)
