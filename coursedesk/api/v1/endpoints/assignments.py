from fastapi import APIRouter, Depends
from coursedesk.api.deps import get_assignment_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import assignment as schemas
from coursedesk.services.assignment_service import AssignmentService
from coursedesk.services.guard import Identity

router = APIRouter()

@router.post("", response_model=schemas.Assignment)
def create_assignment(
    assignment_in: schemas.AssignmentCreate,
    identity: Identity = Depends(get_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.create_assignment(identity, assignment_in)

@router.get("/{assignment_id}", response_model=schemas.AssignmentDetail)
def get_assignment(
    assignment_id: str,
    identity: Identity = Depends(get_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.get_assignment_detail(identity, assignment_id)
