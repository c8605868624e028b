from sqlalchemy.orm import Session

from database.repositories import AnswerRepository, ExpertiseRepository, QualityMetricsRepository


class QARepository:
    """
    Session-bound access to everything the Q&A quality engine reads and writes.

    Groups the focused repositories so a unit of work hands out a single
    object sharing one Session (and one transaction).
    """

    def __init__(self, db: Session):
        self.db = db
        self.answers = AnswerRepository(db)
        self.expertise = ExpertiseRepository(db)
        self.metrics = QualityMetricsRepository(db)
