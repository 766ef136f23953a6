from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from schoolms.core.deps import get_db
from schoolms.core.permissions import require_teacher
from schoolms.core.responses import ensure_ok
from schoolms.crud import teacher as teacher_ops
from schoolms.models.user import User
from schoolms.schemas.course import TeacherCourseInfo
from schoolms.schemas.gradebook import AttendanceUpdate, CourseStudentInfo, GradeUpdate
from schoolms.schemas.result import ActionResult

router = APIRouter()


def _ensure_course_instructor(db: Session, teacher: User, crn: int) -> None:
    if not teacher_ops.teaches_course(db, teacher.id, crn):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not course instructor"
        )


@router.get("/courses", response_model=list[TeacherCourseInfo])
def my_courses(
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    return teacher_ops.get_teacher_courses(db, me.id)


@router.get("/courses/{crn}/students", response_model=list[CourseStudentInfo])
def course_students(
    crn: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    _ensure_course_instructor(db, me, crn)
    return teacher_ops.get_course_students(db, crn)


@router.put("/courses/{crn}/students/{student_id}/grade", response_model=ActionResult)
def set_grade(
    crn: int,
    student_id: int,
    payload: GradeUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    _ensure_course_instructor(db, me, crn)
    return ensure_ok(teacher_ops.update_student_grade(db, student_id, crn, payload.grade))


@router.put(
    "/courses/{crn}/students/{student_id}/attendance", response_model=ActionResult
)
def set_attendance(
    crn: int,
    student_id: int,
    payload: AttendanceUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    _ensure_course_instructor(db, me, crn)
    return ensure_ok(
        teacher_ops.update_student_attendance(db, student_id, crn, payload.attendance)
    )


@router.post(
    "/courses/{crn}/students/{student_id}/complete", response_model=ActionResult
)
def complete_course(
    crn: int,
    student_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_teacher),
):
    _ensure_course_instructor(db, me, crn)
    return ensure_ok(teacher_ops.complete_course_for_student(db, student_id, crn))
