from fastapi import APIRouter, Depends
from coursedesk.api.deps import get_enrollment_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import course as schemas
from coursedesk.services.enrollment_service import EnrollmentService
from coursedesk.services.guard import Identity

router = APIRouter()

@router.post("", response_model=schemas.Enrollment)
def enroll(
    enrollment_in: schemas.EnrollmentCreate,
    identity: Identity = Depends(get_identity),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return service.create_enrollment(identity, enrollment_in.course_id)
