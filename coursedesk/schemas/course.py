from pydantic import Field
from typing import Optional
from datetime import datetime
from coursedesk.schemas.base import CamelModel
from coursedesk.schemas.user import UserContact, UserName

class CourseBase(CamelModel):
    title: str = Field(..., min_length=1)
    description: str
    duration: str

class CourseCreate(CourseBase):
    pass

class Course(CourseBase):
    id: str
    teacher_id: str
    created_at: datetime

class CourseWithTeacher(Course):
    teacher: UserName

class CourseTitle(CamelModel):
    title: str

class EnrollmentCreate(CamelModel):
    course_id: str = Field(..., min_length=1)

class Enrollment(CamelModel):
    id: str
    student_id: str
    course_id: str
    enrolled_at: datetime

class StudentEnrollment(Enrollment):
    course: CourseWithTeacher

class CourseEnrollment(Enrollment):
    student: UserContact

class TeacherStudent(CamelModel):
    student: UserContact
    course: CourseTitle
