from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coperex.api.deps import get_current_user, require_admin
from coperex.core.errors import NotFoundError, PersistenceError
from coperex.core.logging import get_logger
from coperex.db.session import get_db
from coperex.models.company import Company
from coperex.models.user import User
from coperex.schemas.company import CompanyOut
from coperex.services.companies import resolve_years_trajectory
from coperex.services.report import REPORT_FILENAME, XLSX_MEDIA_TYPE, build_companies_workbook
from coperex.validation.chain import ValidatedRequest, validate_fields
from coperex.validation.companies import (
    CREATE_COMPANY,
    DELETE_COMPANY,
    GET_COMPANY,
    LIST_COMPANIES,
    UPDATE_COMPANY,
)

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

DEFAULT_PAGE_SIZE = 10
# request field -> column attribute
FIELD_MAP = {
    "name": "name",
    "description": "description",
    "levelImpact": "level_impact",
    "category": "category",
}


def _company_out(company: Company) -> Dict[str, Any]:
    return CompanyOut.model_validate(company).model_dump(mode="json", by_alias=True)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=dict)
def create_company(
    data: ValidatedRequest = Depends(validate_fields(*CREATE_COMPANY)),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payload = data.body
    company = Company(
        name=payload["name"],
        description=payload["description"],
        level_impact=payload["levelImpact"],
        years_trajectory=resolve_years_trajectory(payload),
        category=payload["category"],
        created_by_id=user.id,
        status=True,
    )
    try:
        db.add(company)
        db.commit()
        db.refresh(company)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Registering company %s failed: %s", payload["name"], e)
        raise PersistenceError("Error registering company", e)
    logger.info("Company %s registered by %s", company.name, user.username)
    return {"success": True, "message": "Company registered successfully", "company": _company_out(company)}


@router.get("/report/excel")
def companies_report(db: Session = Depends(get_db)):
    """Download every active company as an .xlsx workbook."""
    try:
        companies = db.execute(
            select(Company).where(Company.status == True).order_by(Company.name.asc())  # noqa: E712
        ).scalars().all()
    except SQLAlchemyError as e:
        raise PersistenceError("Error generating report", e)
    if not companies:
        raise NotFoundError("No companies registered to build the report")
    content = build_companies_workbook(companies)
    return Response(
        content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={REPORT_FILENAME}"},
    )


@router.get("", response_model=dict)
def list_companies(data: ValidatedRequest = Depends(validate_fields(*LIST_COMPANIES)), db: Session = Depends(get_db)):
    """Active companies with optional filters.

    Query:
        limite: page size (default 10)
        desde: offset (default 0)
        order: asc|desc by name (default asc)
        minYears / maxYears: years of trajectory range, inclusive
        category: exact category match

    ``total`` counts every match regardless of ``limite``/``desde``.
    """
    q = data.query
    filters = [Company.status == True]  # noqa: E712
    if q.get("minYears") is not None:
        filters.append(Company.years_trajectory >= q["minYears"])
    if q.get("maxYears") is not None:
        filters.append(Company.years_trajectory <= q["maxYears"])
    if q.get("category"):
        filters.append(Company.category == q["category"])
    ordering = Company.name.desc() if q.get("order") == "desc" else Company.name.asc()

    try:
        total = db.execute(select(func.count(Company.id)).where(*filters)).scalar_one()
        companies = db.execute(
            select(Company)
            .where(*filters)
            .order_by(ordering)
            .offset(q.get("desde", 0))
            .limit(q.get("limite", DEFAULT_PAGE_SIZE))
        ).scalars().all()
    except SQLAlchemyError as e:
        raise PersistenceError("Error fetching companies", e)
    return {"success": True, "total": total, "companies": [_company_out(c) for c in companies]}


@router.get("/{id}", response_model=dict)
def get_company(data: ValidatedRequest = Depends(validate_fields(*GET_COMPANY)), db: Session = Depends(get_db)):
    try:
        company = db.get(Company, data.params["id"])
    except SQLAlchemyError as e:
        raise PersistenceError("Error fetching company", e)
    if company is None:
        raise NotFoundError("Company not found")
    return {"success": True, "company": _company_out(company)}


@router.put("/{id}", response_model=dict)
def update_company(data: ValidatedRequest = Depends(validate_fields(*UPDATE_COMPANY)), db: Session = Depends(get_db)):
    payload = data.body
    try:
        company = db.get(Company, data.params["id"])
        if company is None or not company.status:
            raise NotFoundError("Company not found for update")
        for field, attr in FIELD_MAP.items():
            if field in payload:
                setattr(company, attr, payload[field])
        years = resolve_years_trajectory(payload)
        if years is not None:
            company.years_trajectory = years
        db.commit()
        db.refresh(company)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Error updating company", e)
    return {"success": True, "message": "Company updated successfully", "company": _company_out(company)}


@router.delete("/{id}", response_model=dict)
def delete_company(data: ValidatedRequest = Depends(validate_fields(*DELETE_COMPANY)), db: Session = Depends(get_db)):
    """Logical delete: the row stays with status false."""
    try:
        company = db.get(Company, data.params["id"])
        if company is None or not company.status:
            raise NotFoundError("Company not found for deletion")
        company.status = False
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Error deleting company", e)
    logger.info("Company %s logically deleted", company.id)
    return {"success": True, "message": "Company deleted (logically)", "company": company.id}
