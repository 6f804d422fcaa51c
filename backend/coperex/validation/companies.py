"""Validation chains for the company routes."""
from coperex.models.company import LevelImpact
from coperex.validation.chain import body, param, query
from coperex.validation.predicates import company_is_present, company_name_is_unique
from coperex.validation.rules import (
    MAX_PAGE_SIZE,
    Check,
    IsIn,
    IsInt,
    IsString,
    NotFutureYear,
    OptionalField,
    Required,
    RequiredUnless,
    Trim,
)

LEVELS = [level.value for level in LevelImpact]
LEVEL_MESSAGE = "levelImpact must be 'Bajo', 'Medio' or 'Alto'"
YEARS_MESSAGE = "Years of trajectory must be a non-negative integer"
FOUNDING_MESSAGE = "Founding year must be a non-negative integer"


def _target_company(ctx):
    return ctx.cleaned["params"].get("id")


COMPANY_ID = param("id", IsInt(min=1, message="The given ID is not valid"), Check(company_is_present))

CREATE_COMPANY = [
    body("name", Required("Company name is required"), IsString(), Trim(), Check(company_name_is_unique)),
    body("description", Required("Company description is required"), IsString(), Trim()),
    body("levelImpact", IsIn(LEVELS, LEVEL_MESSAGE)),
    body("yearsTrajectory", RequiredUnless("foundingYear", "Years of trajectory or founding year is required"),
         IsInt(min=0, message=YEARS_MESSAGE)),
    body("foundingYear", OptionalField(), IsInt(min=0, message=FOUNDING_MESSAGE), NotFutureYear()),
    body("category", Required("Company category is required"), IsString("Category must be valid text"), Trim()),
]

UPDATE_COMPANY = [
    COMPANY_ID,
    body("name", OptionalField(), IsString(), Trim(), Required("Company name cannot be empty"),
         Check(company_name_is_unique, exclude=_target_company)),
    body("description", OptionalField(), IsString(), Trim(), Required("Company description cannot be empty")),
    body("levelImpact", OptionalField(), IsIn(LEVELS, LEVEL_MESSAGE)),
    body("yearsTrajectory", OptionalField(), IsInt(min=0, message=YEARS_MESSAGE)),
    body("foundingYear", OptionalField(), IsInt(min=0, message=FOUNDING_MESSAGE), NotFutureYear()),
    body("category", OptionalField(), IsString("Category must be valid text"), Trim(), Required("Company category cannot be empty")),
]

GET_COMPANY = [COMPANY_ID]

DELETE_COMPANY = [COMPANY_ID]

LIST_COMPANIES = [
    query("limite", OptionalField(), IsInt(min=1, max=MAX_PAGE_SIZE, message=f"limite must be an integer between 1 and {MAX_PAGE_SIZE}")),
    query("desde", OptionalField(), IsInt(min=0, message="desde must be a non-negative integer")),
    query("order", OptionalField(), IsIn(["asc", "desc"], "order must be 'asc' or 'desc'")),
    query("minYears", OptionalField(), IsInt(min=0, message="minYears must be a non-negative integer")),
    query("maxYears", OptionalField(), IsInt(min=0, message="maxYears must be a non-negative integer")),
    query("category", OptionalField(), IsString("Category must be valid text"), Trim()),
]
