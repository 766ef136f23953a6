from schoolms.db.base_class import Base

# import models so SQLAlchemy registers them on Base.metadata
from schoolms.models import course, enrollment, grade, user  # noqa: F401

__all__ = ["Base"]
