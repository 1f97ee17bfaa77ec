# backend/models/proposal.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Date, func, Enum, JSON, Text
from sqlalchemy.orm import relationship
from database import Base
import enum

# Lifecycle states of a quotation
class ProposalStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"

# A quotation given to a client, composed of groups of positions.
# Monetary totals are not stored, they are recomputed from the positions.
class ProposalDocument(Base):
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(32), unique=True, index=True, nullable=False)

    client_id = Column(Integer, nullable=True, index=True)
    client_name = Column(String(255), nullable=False)
    manager = Column(String(255), nullable=True)

    proposal_date = Column(Date, nullable=False)
    valid_until = Column(Date, nullable=True)
    status = Column(Enum(ProposalStatus), default=ProposalStatus.DRAFT, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    groups = relationship(
        "ProposalGroup",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="ProposalGroup.sort_order",
    )

class ProposalGroup(Base):
    __tablename__ = "proposal_groups"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("proposals.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)

    document = relationship("ProposalDocument", back_populates="groups")
    positions = relationship(
        "ProposalPosition",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="ProposalPosition.sort_order",
    )

# One priced, configured line item
class ProposalPosition(Base):
    __tablename__ = "proposal_positions"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("proposal_groups.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    supplier_category_id = Column(Integer, ForeignKey("supplier_categories.id"), nullable=False)

    # parameter id (as string) -> submitted value
    configuration = Column(JSON, nullable=False, default=dict)
    notes = Column(String(1024), nullable=True)
    description = Column(Text, nullable=True)

    unit_price = Column(Float, nullable=False, default=0)
    quantity = Column(Float, nullable=False, default=1)
    discount_percent = Column(Float, nullable=False, default=0)
    vat_percent = Column(Float, nullable=False, default=0)

    sort_order = Column(Integer, default=0, nullable=False)

    group = relationship("ProposalGroup", back_populates="positions")
    supplier_category = relationship("SupplierCategory")
