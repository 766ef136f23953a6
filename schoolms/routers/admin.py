from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolms.core.deps import get_db
from schoolms.core.permissions import require_admin
from schoolms.core.responses import ensure_ok
from schoolms.crud import admin as admin_ops
from schoolms.schemas.course import (
    CourseAssignmentCreate,
    CourseAssignmentInfo,
    CourseCreate,
    CourseListing,
)
from schoolms.schemas.result import ActionResult
from schoolms.schemas.user import StudentCreate, StudentSummary, TeacherCreate, TeacherSummary

# every admin endpoint needs an administrator token
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/students", response_model=list[StudentSummary])
def list_students(db: Session = Depends(get_db)):
    return admin_ops.get_all_students(db)


@router.get("/teachers", response_model=list[TeacherSummary])
def list_teachers(db: Session = Depends(get_db)):
    return admin_ops.get_all_teachers(db)


@router.get("/courses", response_model=list[CourseListing])
def list_courses(db: Session = Depends(get_db)):
    return admin_ops.get_all_courses(db)


@router.get("/assignments", response_model=list[CourseAssignmentInfo])
def list_assignments(db: Session = Depends(get_db)):
    return admin_ops.get_all_course_assignments(db)


@router.post("/courses", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)):
    return ensure_ok(
        admin_ops.add_course(
            db, payload.course_name, payload.crn, payload.credits, payload.capacity
        )
    )


@router.delete("/courses/{crn}", response_model=ActionResult)
def delete_course(crn: int, db: Session = Depends(get_db)):
    return ensure_ok(admin_ops.remove_course(db, crn))


@router.post("/students", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    return ensure_ok(
        admin_ops.add_student(
            db, payload.username, payload.password, payload.name, payload.max_units
        )
    )


@router.post("/teachers", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)):
    return ensure_ok(
        admin_ops.add_teacher(
            db,
            payload.username,
            payload.password,
            payload.name,
            payload.max_courses,
            payload.courses_taught,
        )
    )


@router.delete("/users/{user_id}", response_model=ActionResult)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    return ensure_ok(admin_ops.remove_user(db, user_id))


@router.post(
    "/assignments", response_model=ActionResult, status_code=status.HTTP_201_CREATED
)
def assign_course(payload: CourseAssignmentCreate, db: Session = Depends(get_db)):
    return ensure_ok(admin_ops.assign_course_to_teacher(db, payload.teacher_id, payload.crn))


@router.delete("/assignments/{teacher_id}/{crn}", response_model=ActionResult)
def unassign_course(teacher_id: int, crn: int, db: Session = Depends(get_db)):
    return ensure_ok(admin_ops.unassign_course_from_teacher(db, teacher_id, crn))
