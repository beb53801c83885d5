"""
Domain model: a competency category used to classify skills.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from skillz.models.base import Base, IdMixin, ModelMixin


class Domain(Base, IdMixin, ModelMixin):
    """
    Attributes:
        id: Integer primary key
        name: Unique domain name ("Back", "Mobile", "Data")
        color: Display color prefixed by '#', optional
    """

    __tablename__ = "domains"

    name = Column(String(255), nullable=False, unique=True)

    color = Column(String(32), nullable=True, doc="Display color, e.g. #6186ea")

    # Skills are detached (domain_id set to NULL) by the database when
    # the domain is deleted.
    skills = relationship("Skill", back_populates="domain", passive_deletes=True)
