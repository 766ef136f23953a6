from sqlalchemy import Column, ForeignKey, Integer

from schoolms.db.base_class import Base


class CourseEnrollment(Base):
    __tablename__ = "course_enrollments"

    course_crn = Column(Integer, ForeignKey("courses.crn"), primary_key=True)
    student_id = Column(
        Integer, ForeignKey("students.id"), primary_key=True, index=True
    )
    # per-student registration sequence, starts at 1, never reused
    enrollment_order = Column(Integer, nullable=False)
