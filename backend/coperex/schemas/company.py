from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from coperex.schemas.user import OwnerOut


class CompanyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    description: str
    level_impact: str
    years_trajectory: int
    category: str
    created_by: OwnerOut | None = None
    status: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
