from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.homework import Homework
from school_api.schemas.homework import HomeworkCreate, HomeworkUpdate


class CRUDHomework(ScopedCRUD[Homework, HomeworkCreate, HomeworkUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(owner=Homework.teacher_id, class_division=Homework.class_division_id)

    def default_order(self):
        return [Homework.due_date.asc(), Homework.id.asc()]


crud_homework = CRUDHomework(Homework)
