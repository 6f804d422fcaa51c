"""
Validation chains and the error aggregator.

A route declares an ordered list of ``FieldChain`` objects. ``validate_fields``
turns that list into a FastAPI dependency which runs every chain against the
request and either hands the cleaned values to the endpoint or stops the
request:

- any field failure            -> 400 with every failing field listed;
- only missing path targets    -> 404;
- a failing store lookup       -> 500;
- no failures                  -> ``ValidatedRequest``.

Usage:
    @router.post("/")
    def create(data: ValidatedRequest = Depends(validate_fields(*CREATE_COMPANY))):
        ...
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from coperex.core.errors import NotFoundError, PersistenceError, ValidationError
from coperex.core.logging import get_logger
from coperex.db.session import get_db
from coperex.models.user import User
from coperex.validation.rules import MISSING, Rule, RuleViolation

logger = get_logger(__name__)

LOCATIONS = ("body", "params", "query", "auth")


@dataclass
class FieldChain:
    location: str
    field: str
    rules: Sequence[Rule]

    def __post_init__(self):
        if self.location not in LOCATIONS:
            raise ValueError(f"Unknown location {self.location!r}")


def body(field: str, *rules: Rule) -> FieldChain:
    return FieldChain("body", field, rules)


def param(field: str, *rules: Rule) -> FieldChain:
    return FieldChain("params", field, rules)


def query(field: str, *rules: Rule) -> FieldChain:
    return FieldChain("query", field, rules)


def auth(field: str, *rules: Rule) -> FieldChain:
    """Chain over the authenticated identity (``user`` is its id)."""
    return FieldChain("auth", field, rules)


@dataclass
class ValidationContext:
    db: Session
    body: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    user: Optional[User] = None
    cleaned: Dict[str, Dict[str, Any]] = field(
        default_factory=lambda: {loc: {} for loc in LOCATIONS}
    )

    def source(self, location: str) -> Dict[str, Any]:
        if location == "auth":
            return {"user": self.user.id} if self.user is not None else {}
        return getattr(self, location)


@dataclass
class ValidatedRequest:
    body: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)


def run_chains(chains: Sequence[FieldChain], ctx: ValidationContext) -> Tuple[Dict[str, Dict[str, Any]], List[dict]]:
    """Fold every chain into (cleaned values, errors).

    Rules of a chain stop at the first failure so a malformed value never
    reaches a store-backed rule. Chains run in declaration order and later
    chains can read earlier results through ``ctx.cleaned``.
    """
    errors: List[dict] = []
    for chain in chains:
        raw = ctx.source(chain.location).get(chain.field, MISSING)
        value = raw
        try:
            for rule in chain.rules:
                value = rule.validate(value, ctx)
                if value is MISSING:
                    break
        except RuleViolation as exc:
            errors.append({
                "location": chain.location,
                "field": chain.field,
                "msg": exc.message,
                "value": None if raw is MISSING else raw,
                "status": exc.status_code,
            })
            continue
        if value is not MISSING:
            ctx.cleaned[chain.location][chain.field] = value
    return ctx.cleaned, errors


def raise_for_errors(errors: List[dict]) -> None:
    if not errors:
        return
    invalid = [e for e in errors if e["status"] == status.HTTP_400_BAD_REQUEST]
    if invalid:
        raise ValidationError([{k: v for k, v in e.items() if k != "status"} for e in invalid])
    raise NotFoundError(errors[0]["msg"])


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError([{"location": "body", "field": None, "msg": "Malformed JSON body", "value": None}])
    if not isinstance(payload, dict):
        raise ValidationError([{"location": "body", "field": None, "msg": "Body must be a JSON object", "value": None}])
    return payload


def validate_fields(*chains: FieldChain):
    """Build a dependency running ``chains`` before the endpoint.

    Guards declared on the router run first and leave the identity on
    ``request.state.user``.
    """
    reads_body = any(c.location == "body" for c in chains)

    async def dependency(request: Request, db: Session = Depends(get_db)) -> ValidatedRequest:
        ctx = ValidationContext(
            db=db,
            body=await _read_json_body(request) if reads_body else {},
            params=dict(request.path_params),
            query=dict(request.query_params),
            user=getattr(request.state, "user", None),
        )
        # Store-backed rules use the sync session
        try:
            cleaned, errors = await run_in_threadpool(run_chains, chains, ctx)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Validation lookup failed on %s: %s", request.url.path, e)
            raise PersistenceError("Error validating request", e)
        raise_for_errors(errors)
        return ValidatedRequest(body=cleaned["body"], params=cleaned["params"], query=cleaned["query"])

    return dependency
