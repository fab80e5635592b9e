from fastapi import APIRouter, Depends
from coursedesk.api.deps import get_discussion_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import discussion as schemas
from coursedesk.services.discussion_service import DiscussionService
from coursedesk.services.guard import Identity

router = APIRouter()

@router.post("", response_model=schemas.Discussion)
def create_discussion(
    discussion_in: schemas.DiscussionCreate,
    identity: Identity = Depends(get_identity),
    service: DiscussionService = Depends(get_discussion_service),
):
    return service.create_discussion(identity, discussion_in)
