from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    crn: int = Field(gt=0)
    course_name: str = Field(min_length=1, max_length=255)
    credits: float = Field(gt=0)
    capacity: int = Field(gt=0)


class CourseListing(BaseModel):
    crn: int
    course_name: str
    credits: float
    capacity: int
    num_students: int
    instructor_name: str


class AvailableCourse(BaseModel):
    crn: int
    course_name: str
    credits: float
    course_size: int
    num_students: int
    instructor: str


class TeacherCourseInfo(BaseModel):
    crn: int
    course_name: str
    credits: float
    course_size: int
    num_students: int


class CourseAssignmentCreate(BaseModel):
    teacher_id: int
    crn: int


class CourseAssignmentInfo(BaseModel):
    teacher_id: int
    teacher_name: str
    course_name: str
    crn: int
    course_order: int
