from fastapi import APIRouter, Depends
from coursedesk.api.deps import get_grade_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import assignment as schemas
from coursedesk.services.grade_service import GradeService
from coursedesk.services.guard import Identity

router = APIRouter()

@router.post("", response_model=schemas.Grade)
def grade_submission(
    grade_in: schemas.GradeCreate,
    identity: Identity = Depends(get_identity),
    service: GradeService = Depends(get_grade_service),
):
    return service.create_grade(identity, grade_in.submission_id, grade_in.grade, grade_in.feedback)
