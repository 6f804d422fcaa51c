"""
Excel report of active companies.

Builds an in-memory .xlsx workbook (openpyxl) with one row per company and
the creator resolved to name and email.
"""
from io import BytesIO
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from coperex.core.logging import get_logger
from coperex.models.company import Company

logger = get_logger(__name__)

REPORT_FILENAME = "companies_report.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, width)
COLUMNS = [
    ("ID", 10),
    ("Name", 30),
    ("Description", 40),
    ("Impact", 15),
    ("Years of trajectory", 20),
    ("Category", 20),
    ("Created by", 25),
    ("Creator email", 30),
]


def company_row(company: Company) -> list:
    owner = company.created_by
    return [
        company.id,
        company.name,
        company.description,
        company.level_impact,
        company.years_trajectory,
        company.category,
        owner.name if owner else "Unknown",
        owner.email if owner else "No email",
    ]


def build_companies_workbook(companies: Iterable[Company]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Companies"

    ws.append([header for header, _ in COLUMNS])
    for idx, (_, width) in enumerate(COLUMNS, start=1):
        ws.cell(row=1, column=idx).font = Font(bold=True)
        ws.column_dimensions[get_column_letter(idx)].width = width

    rows = 0
    for company in companies:
        ws.append(company_row(company))
        rows += 1

    buf = BytesIO()
    wb.save(buf)
    logger.info("Built companies report with %d rows", rows)
    return buf.getvalue()
