from fastapi import APIRouter, Depends, status
from typing import List
from coursedesk.api.deps import (
    get_assignment_service, get_course_service, get_discussion_service,
    get_enrollment_service, get_material_service,
)
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import assignment as assignment_schemas
from coursedesk.schemas import course as schemas
from coursedesk.schemas import discussion as discussion_schemas
from coursedesk.schemas import material as material_schemas
from coursedesk.services.assignment_service import AssignmentService
from coursedesk.services.course_service import CourseService
from coursedesk.services.discussion_service import DiscussionService
from coursedesk.services.enrollment_service import EnrollmentService
from coursedesk.services.guard import Identity
from coursedesk.services.material_service import MaterialService

router = APIRouter()

@router.get("", response_model=List[schemas.CourseWithTeacher])
def list_courses(
    identity: Identity = Depends(get_identity),
    service: CourseService = Depends(get_course_service),
):
    return service.list_catalog(identity)

@router.post("", response_model=schemas.Course)
def create_course(
    course_in: schemas.CourseCreate,
    identity: Identity = Depends(get_identity),
    service: CourseService = Depends(get_course_service),
):
    return service.create_course(identity, course_in)

@router.get("/{course_id}", response_model=schemas.CourseWithTeacher)
def get_course(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: CourseService = Depends(get_course_service),
):
    return service.get_course(identity, course_id)

@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: CourseService = Depends(get_course_service),
):
    service.delete_course(identity, course_id)

@router.get("/{course_id}/assignments", response_model=List[assignment_schemas.Assignment])
def list_course_assignments(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_course_assignments(identity, course_id)

@router.get("/{course_id}/enrollments", response_model=List[schemas.CourseEnrollment])
def list_course_enrollments(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return service.list_course_enrollments(identity, course_id)

@router.get("/{course_id}/discussions", response_model=List[discussion_schemas.DiscussionWithUser])
def list_course_discussions(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: DiscussionService = Depends(get_discussion_service),
):
    return service.list_course_discussions(identity, course_id)

@router.get("/{course_id}/materials", response_model=List[material_schemas.Material])
def list_course_materials(
    course_id: str,
    identity: Identity = Depends(get_identity),
    service: MaterialService = Depends(get_material_service),
):
    return service.list_course_materials(identity, course_id)
