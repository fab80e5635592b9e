from fastapi import APIRouter, Depends
from typing import List
from coursedesk.api.deps import get_assignment_service, get_enrollment_service, get_grade_service
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import assignment as assignment_schemas
from coursedesk.schemas import course as course_schemas
from coursedesk.services.assignment_service import AssignmentService
from coursedesk.services.enrollment_service import EnrollmentService
from coursedesk.services.grade_service import GradeService
from coursedesk.services.guard import Identity

router = APIRouter()

@router.get("/enrollments", response_model=List[course_schemas.StudentEnrollment])
def my_enrollments(
    identity: Identity = Depends(get_identity),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return service.list_student_enrollments(identity)

@router.get("/assignments", response_model=List[assignment_schemas.StudentAssignment])
def my_assignments(
    identity: Identity = Depends(get_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_student_assignments(identity)

@router.get("/assignments/pending", response_model=List[assignment_schemas.Assignment])
def my_pending_assignments(
    identity: Identity = Depends(get_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_pending_assignments(identity)

@router.get("/grades", response_model=List[assignment_schemas.StudentGrade])
def my_grades(
    identity: Identity = Depends(get_identity),
    service: GradeService = Depends(get_grade_service),
):
    return service.list_student_grades(identity)
