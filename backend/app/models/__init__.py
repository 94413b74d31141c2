"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Project is the aggregate root; document collections are scoped by project_id
    - Messages reference candidates by value, never by foreign key

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from app.models.user import User  # noqa: F401
from app.models.project import Project, project_members  # noqa: F401
from app.models.sub_problem import SubProblem  # noqa: F401
from app.models.choice import Choice  # noqa: F401
from app.models.candidate import Candidate  # noqa: F401
from app.models.desire import Desire  # noqa: F401
from app.models.saved_idea import SavedIdea  # noqa: F401
from app.models.message import Message  # noqa: F401
from app.models.notification import Notification  # noqa: F401
