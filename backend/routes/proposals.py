# backend/routes/proposals.py
import logging
import re
from datetime import date
from typing import Dict, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from config import settings
from database import get_db
from utils.audit import client_ip, write_log
from utils.describer import describe_configuration
from utils.loader import load_effective_parameters
from utils.pdf import generate_proposal_pdf, get_pdf_path
from utils.pricing import recompute_totals, set_group_vat
from utils.validator import validate_configuration
from models.proposal import ProposalDocument, ProposalGroup, ProposalPosition, ProposalStatus
from models.supplier import SupplierCategory
from schemas import proposal as proposal_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["Proposals"])

NUMBER_PATTERN = re.compile(r"^PROP-(\d+)$")


# =========================
# HELPERS
# =========================
def _load_proposal(db: Session, proposal_id: int) -> ProposalDocument:
    proposal = (
        db.query(ProposalDocument)
        .options(selectinload(ProposalDocument.groups).selectinload(ProposalGroup.positions))
        .filter(ProposalDocument.id == proposal_id)
        .first()
    )
    if not proposal:
        raise HTTPException(status_code=404, detail="Proposal not found")
    return proposal


def _next_number(db: Session) -> str:
    # PROP-001, PROP-002, ... continuing after the highest issued number
    highest = 0
    for (number,) in db.query(ProposalDocument.number).all():
        match = NUMBER_PATTERN.match(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"PROP-{highest + 1:03d}"


def _proposal_to_out(proposal: ProposalDocument) -> proposal_schemas.ProposalOut:
    totals = recompute_totals(proposal)
    groups = []
    for group, group_totals in zip(proposal.groups, totals.groups):
        positions = [
            proposal_schemas.ProposalPositionOut(
                id=position.id,
                category_id=position.category_id,
                supplier_category_id=position.supplier_category_id,
                configuration=position.configuration or {},
                notes=position.notes,
                description=position.description,
                unit_price=position.unit_price,
                quantity=position.quantity,
                discount_percent=position.discount_percent,
                vat_percent=position.vat_percent,
                **line.model_dump(),
            )
            for position, line in zip(group.positions, group_totals.positions)
        ]
        groups.append(proposal_schemas.ProposalGroupOut(
            id=group.id,
            name=group.name,
            description=group.description,
            positions=positions,
            subtotal=group_totals.subtotal,
            discount=group_totals.discount,
            vat_amount=group_totals.vat_amount,
            total=group_totals.total,
        ))

    return proposal_schemas.ProposalOut(
        id=proposal.id,
        number=proposal.number,
        client_name=proposal.client_name,
        client_id=proposal.client_id,
        manager=proposal.manager,
        proposal_date=proposal.proposal_date,
        valid_until=proposal.valid_until,
        status=proposal.status,
        notes=proposal.notes,
        groups=groups,
        subtotal=totals.subtotal,
        discount=totals.discount,
        vat_amount=totals.vat_amount,
        total=totals.total,
    )


class _Configurator:
    """Resolves each (category, supplier) pair once per request."""

    def __init__(self, db: Session, locale: Optional[str]):
        self.db = db
        self.locale = locale or settings.DEFAULT_LOCALE
        self._resolved: Dict[Tuple[int, int], list] = {}

    def parameters_for(self, category_id: int, supplier_category_id: int) -> list:
        link = self.db.query(SupplierCategory).filter(SupplierCategory.id == supplier_category_id).first()
        if not link or not link.is_active:
            raise HTTPException(status_code=400, detail=f"Supplier category {supplier_category_id} not found")
        if link.category_id != category_id:
            raise HTTPException(
                status_code=400,
                detail=f"Supplier category {supplier_category_id} does not belong to category {category_id}",
            )
        key = (category_id, link.supplier_id)
        if key not in self._resolved:
            self._resolved[key] = load_effective_parameters(self.db, category_id, link.supplier_id)
        return self._resolved[key]

    def check(self, category_id: int, supplier_category_id: int, configuration, notes: Optional[str]):
        """Returns (errors, generated description) for one position."""
        parameters = self.parameters_for(category_id, supplier_category_id)
        result = validate_configuration(parameters, configuration, self.locale)
        if not result.ok:
            return result.errors, None
        return {}, describe_configuration(parameters, configuration, self.locale, notes=notes)


# =========================
# ENDPOINTS
# =========================
@router.post("", response_model=proposal_schemas.ProposalOut, status_code=201)
def create_proposal(
    payload: proposal_schemas.ProposalCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    if sum(len(group.positions) for group in payload.groups) == 0:
        raise HTTPException(status_code=400, detail="Proposal must contain at least one position")

    for index, group in enumerate(payload.groups):
        if group.vat_percent is not None:
            payload = set_group_vat(payload, index, group.vat_percent)

    configurator = _Configurator(db, payload.locale)
    failures = []
    descriptions = {}
    for group_index, group in enumerate(payload.groups):
        for position_index, position in enumerate(group.positions):
            errors, description = configurator.check(
                position.category_id, position.supplier_category_id, position.configuration, position.notes
            )
            if errors:
                failures.append({"group": group_index, "position": position_index, "errors": errors})
            else:
                descriptions[(group_index, position_index)] = position.description or description

    if failures:
        write_log(
            db, action="PROPOSAL_CREATE", resource="proposals", status="FAIL",
            ip=client_ip(request),
            meta={"client_name": payload.client_name, "invalid_positions": len(failures)},
        )
        raise HTTPException(status_code=422, detail=failures)

    proposal = ProposalDocument(
        number=_next_number(db),
        client_name=payload.client_name.strip(),
        client_id=payload.client_id,
        manager=payload.manager,
        proposal_date=payload.proposal_date or date.today(),
        valid_until=payload.valid_until,
        status=payload.status,
        notes=payload.notes,
    )
    for group_index, group_data in enumerate(payload.groups):
        group = ProposalGroup(name=group_data.name, description=group_data.description, sort_order=group_index)
        for position_index, position_data in enumerate(group_data.positions):
            vat = position_data.vat_percent
            group.positions.append(ProposalPosition(
                category_id=position_data.category_id,
                supplier_category_id=position_data.supplier_category_id,
                configuration=position_data.configuration,
                notes=position_data.notes,
                description=descriptions[(group_index, position_index)],
                unit_price=position_data.unit_price,
                quantity=position_data.quantity,
                discount_percent=position_data.discount_percent,
                vat_percent=settings.DEFAULT_VAT_RATE if vat is None else vat,
                sort_order=position_index,
            ))
        proposal.groups.append(group)

    db.add(proposal)
    db.commit()
    db.refresh(proposal)

    out = _proposal_to_out(proposal)
    logger.info("Created proposal %s with %d groups", proposal.number, len(proposal.groups))
    write_log(
        db, action="PROPOSAL_CREATE", resource="proposals", resource_id=proposal.id,
        ip=client_ip(request),
        meta={"proposal_id": proposal.id, "number": proposal.number, "total": out.total},
    )
    return out


@router.get("", response_model=proposal_schemas.ProposalListPage)
def list_proposals(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ProposalStatus] = Query(None),
    search: Optional[str] = Query(None, description="Client name or proposal number"),
    db: Session = Depends(get_db),
):
    query = db.query(ProposalDocument).options(
        selectinload(ProposalDocument.groups).selectinload(ProposalGroup.positions)
    )
    if status is not None:
        query = query.filter(ProposalDocument.status == status)
    if search:
        query = query.filter(or_(
            ProposalDocument.client_name.ilike(f"%{search}%"),
            ProposalDocument.number.ilike(f"%{search}%"),
        ))

    total = query.count()
    proposals = (
        query.order_by(ProposalDocument.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    items = [
        proposal_schemas.ProposalListItem(
            id=p.id,
            number=p.number,
            client_name=p.client_name,
            proposal_date=p.proposal_date,
            status=p.status,
            total=recompute_totals(p).total,
        )
        for p in proposals
    ]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/{proposal_id}", response_model=proposal_schemas.ProposalOut)
def get_proposal(proposal_id: int, db: Session = Depends(get_db)):
    return _proposal_to_out(_load_proposal(db, proposal_id))


@router.patch("/{proposal_id}", response_model=proposal_schemas.ProposalOut)
def update_proposal(
    proposal_id: int,
    payload: proposal_schemas.ProposalUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    proposal = _load_proposal(db, proposal_id)
    data = payload.model_dump(exclude_unset=True)
    if "client_name" in data and data["client_name"] is None:
        raise HTTPException(status_code=400, detail="client_name cannot be empty")
    for key, value in data.items():
        setattr(proposal, key, value)

    db.commit()
    db.refresh(proposal)

    write_log(
        db, action="PROPOSAL_UPDATE", resource="proposals", resource_id=proposal.id,
        ip=client_ip(request),
        meta={"proposal_id": proposal.id, "fields": sorted(data)},
    )
    return _proposal_to_out(proposal)


@router.delete("/{proposal_id}")
def delete_proposal(proposal_id: int, request: Request, db: Session = Depends(get_db)):
    proposal = _load_proposal(db, proposal_id)
    number = proposal.number
    db.delete(proposal)
    db.commit()

    write_log(
        db, action="PROPOSAL_DELETE", resource="proposals", resource_id=proposal_id,
        ip=client_ip(request),
        meta={"proposal_id": proposal_id, "number": number},
    )
    return {"message": "Proposal deleted"}


@router.post("/{proposal_id}/groups/{group_id}/vat", response_model=proposal_schemas.ProposalOut)
def set_proposal_group_vat(
    proposal_id: int,
    group_id: int,
    payload: proposal_schemas.GroupVatUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    proposal = _load_proposal(db, proposal_id)
    group = next((g for g in proposal.groups if g.id == group_id), None)
    if group is None:
        raise HTTPException(status_code=404, detail="Group not found in this proposal")

    for position in group.positions:
        position.vat_percent = payload.vat_percent
    db.commit()
    db.refresh(proposal)

    write_log(
        db, action="PROPOSAL_GROUP_VAT", resource="proposals", resource_id=proposal_id,
        ip=client_ip(request),
        meta={"proposal_id": proposal_id, "group_id": group_id, "vat_percent": payload.vat_percent},
    )
    return _proposal_to_out(proposal)


@router.patch("/{proposal_id}/positions/{position_id}", response_model=proposal_schemas.ProposalOut)
def update_position(
    proposal_id: int,
    position_id: int,
    payload: proposal_schemas.ProposalPositionUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    proposal = _load_proposal(db, proposal_id)
    found = next(
        ((g, p) for g in proposal.groups for p in g.positions if p.id == position_id),
        None,
    )
    if found is None:
        raise HTTPException(status_code=404, detail="Position not found in this proposal")
    group, position = found

    data = payload.model_dump(exclude_unset=True)
    locale = data.pop("locale", None)

    # Only a changed configuration or note needs a fresh description
    if "configuration" in data or "notes" in data:
        configuration = data.get("configuration")
        if configuration is None:
            configuration = position.configuration or {}
        notes = data["notes"] if "notes" in data else position.notes

        configurator = _Configurator(db, locale)
        errors, description = configurator.check(
            position.category_id, position.supplier_category_id, configuration, notes
        )
        if errors:
            raise HTTPException(
                status_code=422,
                detail=[{"group": group.sort_order, "position": position.sort_order, "errors": errors}],
            )
        position.configuration = configuration
        position.notes = notes
        position.description = description

    for key in ("unit_price", "quantity", "discount_percent", "vat_percent"):
        if data.get(key) is not None:
            setattr(position, key, data[key])

    db.commit()
    db.refresh(proposal)

    write_log(
        db, action="PROPOSAL_POSITION_UPDATE", resource="proposals", resource_id=proposal_id,
        ip=client_ip(request),
        meta={"proposal_id": proposal_id, "position_id": position_id, "fields": sorted(data)},
    )
    return _proposal_to_out(proposal)


@router.get("/{proposal_id}/pdf")
def download_proposal_pdf(proposal_id: int, request: Request, db: Session = Depends(get_db)):
    # Regenerated on every download, proposals stay editable
    proposal = _load_proposal(db, proposal_id)
    pdf_path = get_pdf_path(proposal.number)
    try:
        generate_proposal_pdf(proposal, recompute_totals(proposal), pdf_path)
    except Exception as e:
        logger.exception("PDF generation failed for proposal %s", proposal.number)
        raise HTTPException(status_code=500, detail=f"Could not generate PDF: {e}")

    write_log(
        db, action="PROPOSAL_PDF_DOWNLOAD", resource="proposals", resource_id=proposal.id,
        ip=client_ip(request),
        meta={"proposal_id": proposal.id},
    )
    return FileResponse(path=str(pdf_path), media_type="application/pdf", filename=f"{proposal.number}.pdf")
