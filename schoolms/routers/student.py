from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolms.core.deps import get_db
from schoolms.core.permissions import require_student
from schoolms.core.responses import ensure_ok
from schoolms.crud import student as student_ops
from schoolms.models.user import User
from schoolms.schemas.course import AvailableCourse
from schoolms.schemas.enrollment import CompletedCourse, CurrentCourse, EnrollmentCreate
from schoolms.schemas.result import ActionResult

router = APIRouter()


@router.get("/courses/available", response_model=list[AvailableCourse])
def available_courses(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return student_ops.get_available_courses(db, me.id)


@router.get("/courses/current", response_model=list[CurrentCourse])
def current_courses(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return student_ops.get_current_courses(db, me.id)


@router.get("/courses/completed", response_model=list[CompletedCourse])
def completed_courses(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return student_ops.get_completed_courses(db, me.id)


@router.post(
    "/enrollments",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Course is full or already completed"},
        404: {"description": "Course not found"},
        409: {"description": "Already enrolled"},
    },
)
def enroll_me(
    payload: EnrollmentCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return ensure_ok(student_ops.enroll_in_course(db, me.id, payload.crn))


@router.delete("/enrollments/{crn}", response_model=ActionResult)
def drop_my_course(
    crn: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    return ensure_ok(student_ops.drop_course(db, me.id, crn))
