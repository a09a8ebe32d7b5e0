# familyhub/repositories/domain_repositories.py
from typing import List, Optional

from sqlalchemy.orm import Session

from familyhub.models.academic_event import AcademicEvent
from familyhub.models.doctor import Doctor
from familyhub.models.portal import Portal
from familyhub.models.task import Task
from familyhub.models.travel import TravelDetail
from familyhub.models.user import User
from familyhub.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(User, db)


class TaskRepository(BaseRepository[Task]):
    def __init__(self, db: Session):
        super().__init__(Task, db)

    def get_in_category(self, task_id: str, category: str) -> Optional[Task]:
        return self.get_by(id=task_id, category=category)


class TravelDetailRepository(BaseRepository[TravelDetail]):
    def __init__(self, db: Session):
        super().__init__(TravelDetail, db)

    def list_for_trip(self, trip_id: str) -> List[TravelDetail]:
        return (
            self.db.query(TravelDetail)
            .filter(TravelDetail.trip_id == trip_id)
            .order_by(TravelDetail.departure_time)
            .all()
        )


class AcademicEventRepository(BaseRepository[AcademicEvent]):
    def __init__(self, db: Session):
        super().__init__(AcademicEvent, db)


class DoctorRepository(BaseRepository[Doctor]):
    def __init__(self, db: Session):
        super().__init__(Doctor, db)


class PortalRepository(BaseRepository[Portal]):
    def __init__(self, db: Session):
        super().__init__(Portal, db)

    def get_for_doctor(self, doctor_id: str) -> Optional[Portal]:
        return self.get_by(doctor_id=doctor_id)
