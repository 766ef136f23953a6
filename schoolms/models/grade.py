from sqlalchemy import Column, Float, ForeignKey, Integer

from schoolms.db.base_class import Base


class CurrentCourseGrade(Base):
    __tablename__ = "current_course_grades"

    student_id = Column(Integer, ForeignKey("students.id"), primary_key=True)
    course_crn = Column(Integer, ForeignKey("courses.crn"), primary_key=True)
    grade = Column(Float, nullable=False, default=0)
    attendance = Column(Float, nullable=False, default=0)


class CompletedCourseGrade(Base):
    """Historical record written once when a course is completed."""

    __tablename__ = "completed_course_grades"

    student_id = Column(Integer, ForeignKey("students.id"), primary_key=True)
    course_crn = Column(Integer, ForeignKey("courses.crn"), primary_key=True)
    grade = Column(Float, nullable=False)
    attendance = Column(Float, nullable=False)
