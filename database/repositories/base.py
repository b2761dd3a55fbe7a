from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories wrap one Session; transaction scope belongs to the caller (see database.uow)."""

    def __init__(self, db: Session):
        self.db = db
