"""ORM Models — SQLAlchemy declarative models for all curation entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Profile is the aggregate root; every other entity is scoped by profile_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/Alembic runs
"""

from threesby.models.profile import Profile  # noqa: F401
from threesby.models.pick import Pick  # noqa: F401
from threesby.models.submission_review import SubmissionReview  # noqa: F401
from threesby.models.invite_code import InviteCode  # noqa: F401
from threesby.models.collection import Collection  # noqa: F401
