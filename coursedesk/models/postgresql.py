from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Boolean, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime
import enum
import uuid

Base = declarative_base()

def generate_id() -> str:
    return str(uuid.uuid4())

class UserRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"

class NotificationType(str, enum.Enum):
    ENROLLMENT = "Enrollment"
    ASSIGNMENT = "Assignment"
    SUBMISSION = "Submission"
    GRADE = "Grade"

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'student' or 'teacher', never changed
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    courses_teaching = relationship("Course", back_populates="teacher", cascade="all, delete", passive_deletes=True)
    enrollments = relationship("Enrollment", back_populates="student", cascade="all, delete", passive_deletes=True)
    submissions = relationship("Submission", back_populates="student", cascade="all, delete", passive_deletes=True)
    discussions = relationship("Discussion", back_populates="user", cascade="all, delete", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", cascade="all, delete", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(role.in_(['student', 'teacher']), name='role_check'),
    )

class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(String, nullable=False)
    teacher_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("User", back_populates="courses_teaching")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete", passive_deletes=True)
    assignments = relationship("Assignment", back_populates="course", cascade="all, delete", passive_deletes=True)
    discussions = relationship("Discussion", back_populates="course", cascade="all, delete", passive_deletes=True)
    materials = relationship("Material", back_populates="course", cascade="all, delete", passive_deletes=True)

class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(String(36), primary_key=True, default=generate_id)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint('student_id', 'course_id', name='unique_enrollment_per_student'),
    )

class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=generate_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    instructions = Column(Text, nullable=False)
    due_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete", passive_deletes=True)

class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=generate_id)
    assignment_id = Column(String(36), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    file_url = Column(String, nullable=True)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", back_populates="submissions")
    grade = relationship("Grade", back_populates="submission", uselist=False, cascade="all, delete", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint('assignment_id', 'student_id', name='unique_submission_per_student'),
    )

class Grade(Base):
    __tablename__ = "grades"

    id = Column(String(36), primary_key=True, default=generate_id)
    submission_id = Column(String(36), ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, unique=True)
    grade = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)
    graded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    submission = relationship("Submission", back_populates="grade")

    __table_args__ = (
        CheckConstraint('grade >= 0 AND grade <= 100', name='grade_range_check'),
    )

class Discussion(Base):
    __tablename__ = "discussions"

    id = Column(String(36), primary_key=True, default=generate_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    parent_id = Column(String(36), ForeignKey("discussions.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="discussions")
    user = relationship("User", back_populates="discussions")

class Material(Base):
    __tablename__ = "materials"

    id = Column(String(36), primary_key=True, default=generate_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="materials")

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")
