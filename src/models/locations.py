import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship
from src.core.database import Base


class Location(Base):
    """A physical place where an organization keeps stock."""
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_locations_org_name"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    organization = relationship("Organization", back_populates="locations")

    def __repr__(self):
        return f"<Location {self.name}>"
