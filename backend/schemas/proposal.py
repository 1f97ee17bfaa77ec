# backend/schemas/proposal.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import date

from models.proposal import ProposalStatus


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =========================
# TOTALS (engine output)
# =========================
class PositionTotals(BaseModel):
    line_subtotal: float
    line_discount: float
    taxable_base: float
    vat_amount: float
    total: float


class GroupTotals(BaseModel):
    subtotal: float
    discount: float
    vat_amount: float
    total: float
    positions: List[PositionTotals] = []


class DocumentTotals(BaseModel):
    subtotal: float
    discount: float
    vat_amount: float
    total: float
    groups: List[GroupTotals] = []


# =========================
# INPUT
# =========================
class ProposalPositionCreate(BaseModel):
    category_id: int
    supplier_category_id: int
    configuration: Dict[str, Any] = {}
    notes: Optional[str] = Field(None, max_length=1024)
    # Generated from the configuration when omitted
    description: Optional[str] = Field(None, max_length=1024)
    unit_price: float = Field(0, ge=0)
    quantity: float = Field(1, ge=0)
    discount_percent: float = Field(0, ge=0, le=100)
    # Falls back to the configured default rate
    vat_percent: Optional[float] = Field(None, ge=0, le=100)


class ProposalGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1024)
    # Applied to every position of the group, overriding their own rates
    vat_percent: Optional[float] = Field(None, ge=0, le=100)
    positions: List[ProposalPositionCreate] = []


class ProposalCreate(BaseModel):
    client_name: str = Field(min_length=1, max_length=255)
    client_id: Optional[int] = None
    manager: Optional[str] = Field(None, max_length=255)
    proposal_date: Optional[date] = None
    valid_until: Optional[date] = None
    status: ProposalStatus = ProposalStatus.DRAFT
    notes: Optional[str] = Field(None, max_length=2000)
    locale: Optional[str] = None
    groups: List[ProposalGroupCreate] = []


class ProposalUpdate(BaseModel):
    """Schema for PATCH requests - header fields only."""
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    client_id: Optional[int] = None
    manager: Optional[str] = Field(None, max_length=255)
    proposal_date: Optional[date] = None
    valid_until: Optional[date] = None
    status: Optional[ProposalStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


class ProposalPositionUpdate(BaseModel):
    """Re-edit of one position. A new configuration or notes re-runs validation."""
    configuration: Optional[Dict[str, Any]] = None
    notes: Optional[str] = Field(None, max_length=1024)
    unit_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[float] = Field(None, ge=0)
    discount_percent: Optional[float] = Field(None, ge=0, le=100)
    vat_percent: Optional[float] = Field(None, ge=0, le=100)
    locale: Optional[str] = None


class GroupVatUpdate(BaseModel):
    vat_percent: float = Field(ge=0, le=100)


# =========================
# OUTPUT
# =========================
class ProposalPositionOut(ORMBase):
    id: int
    category_id: int
    supplier_category_id: int
    configuration: Dict[str, Any]
    notes: Optional[str] = None
    description: Optional[str] = None
    unit_price: float
    quantity: float
    discount_percent: float
    vat_percent: float
    line_subtotal: float
    line_discount: float
    taxable_base: float
    vat_amount: float
    total: float


class ProposalGroupOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    positions: List[ProposalPositionOut]
    subtotal: float
    discount: float
    vat_amount: float
    total: float


class ProposalOut(ORMBase):
    id: int
    number: str
    client_name: str
    client_id: Optional[int] = None
    manager: Optional[str] = None
    proposal_date: date
    valid_until: Optional[date] = None
    status: ProposalStatus
    notes: Optional[str] = None
    groups: List[ProposalGroupOut]
    subtotal: float
    discount: float
    vat_amount: float
    total: float


class ProposalListItem(ORMBase):
    id: int
    number: str
    client_name: str
    proposal_date: date
    status: ProposalStatus
    total: float


# Paginated response wrapper for proposal lists
class ProposalListPage(BaseModel):
    items: List[ProposalListItem]
    total: int
    page: int
    page_size: int
