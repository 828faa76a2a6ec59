from datetime import date
from pydantic import BaseModel


class BirthdayResponse(BaseModel):
    student_id: int
    full_name: str
    class_division_id: int
    date_of_birth: date
    next_birthday: date
    days_until: int
    age_turning: int
