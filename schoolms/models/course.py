from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schoolms.db.base_class import Base


class Course(Base):
    __tablename__ = "courses"

    # CRN is chosen by the administrator, never generated
    crn: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[float] = mapped_column(Float, nullable=False)
    course_size: Mapped[int] = mapped_column(Integer, nullable=False)
    # live counter, kept equal to the number of course_enrollments rows
    num_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class TeacherCourse(Base):
    __tablename__ = "teacher_courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id"), nullable=False, index=True
    )
    course_crn: Mapped[int] = mapped_column(
        ForeignKey("courses.crn"), nullable=False, index=True
    )
    course_order: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("teacher_id", "course_crn", name="uq_teacher_courses_teacher_crn"),
    )
