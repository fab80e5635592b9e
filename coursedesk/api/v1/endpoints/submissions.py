from fastapi import APIRouter, Depends
from coursedesk.api.deps import get_submission_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import assignment as schemas
from coursedesk.services.guard import Identity
from coursedesk.services.submission_service import SubmissionService

router = APIRouter()

@router.post("", response_model=schemas.Submission)
def submit_assignment(
    submission_in: schemas.SubmissionCreate,
    identity: Identity = Depends(get_identity),
    service: SubmissionService = Depends(get_submission_service),
):
    return service.create_submission(
        identity, submission_in.assignment_id, submission_in.content, submission_in.file_url
    )
