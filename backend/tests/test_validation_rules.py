from datetime import datetime

import pytest

from coperex.core.errors import NotFoundError, ValidationError
from coperex.validation.chain import ValidationContext, body, param, query, raise_for_errors, run_chains
from coperex.validation.rules import (
    MAX_INT,
    MISSING,
    Check,
    IsEmail,
    IsIn,
    IsInt,
    IsString,
    MinLength,
    NotFutureYear,
    OptionalField,
    Required,
    RequiredUnless,
    RuleViolation,
    StrongPassword,
    Trim,
)


def ctx(**kwargs):
    return ValidationContext(db=None, **kwargs)


@pytest.mark.parametrize("value", [MISSING, None, "", "   "])
def test_required_rejects_absent_and_blank(value):
    with pytest.raises(RuleViolation):
        Required("Name is required").validate(value, ctx())


def test_optional_field_stops_chain_when_absent():
    assert OptionalField().validate(MISSING, ctx()) is MISSING
    assert OptionalField().validate("x", ctx()) == "x"


def test_required_unless_other_field():
    rule = RequiredUnless("foundingYear")
    assert rule.validate(MISSING, ctx(body={"foundingYear": 2000})) is MISSING
    assert rule.validate(5, ctx(body={})) == 5
    with pytest.raises(RuleViolation):
        rule.validate(MISSING, ctx(body={}))


def test_is_int_converts_numeric_strings_and_checks_bounds():
    assert IsInt(min=0).validate("12", ctx()) == 12
    assert IsInt().validate(7.0, ctx()) == 7
    for bad in ["1.5", "abc", True, -1]:
        with pytest.raises(RuleViolation):
            IsInt(min=0).validate(bad, ctx())
    with pytest.raises(RuleViolation):
        IsInt(max=3).validate(4, ctx())
    assert IsInt().validate(MAX_INT, ctx()) == MAX_INT
    with pytest.raises(RuleViolation):
        IsInt().validate(str(MAX_INT + 1), ctx())
    with pytest.raises(RuleViolation):
        IsInt().validate(1e20, ctx())


def test_is_email_normalizes_case():
    assert IsEmail().validate("Ana@Example.com", ctx()) == "ana@example.com"
    with pytest.raises(RuleViolation) as exc:
        IsEmail().validate("not-an-email", ctx())
    assert exc.value.message == "Not a valid email"


def test_strong_password():
    rule = StrongPassword()
    assert rule.validate("Abcdef1!", ctx()) == "Abcdef1!"
    for weak in ["alllowercase1!", "ALLUPPER1!", "NoDigits!!", "NoSymbol12"]:
        with pytest.raises(RuleViolation):
            rule.validate(weak, ctx())
    with pytest.raises(RuleViolation):
        rule.validate("Ab1!", ctx())


def test_is_in_and_string_rules():
    assert IsIn(["Bajo", "Medio", "Alto"]).validate("Alto", ctx()) == "Alto"
    with pytest.raises(RuleViolation):
        IsIn(["Bajo", "Medio", "Alto"]).validate("Low", ctx())
    with pytest.raises(RuleViolation):
        IsString().validate(5, ctx())
    assert Trim().validate("  Acme ", ctx()) == "Acme"
    with pytest.raises(RuleViolation):
        MinLength(4).validate("abc", ctx())


def test_not_future_year():
    rule = NotFutureYear(now_fn=lambda: datetime(2023, 6, 1))
    assert rule.validate(2023, ctx()) == 2023
    with pytest.raises(RuleViolation):
        rule.validate(2024, ctx())


def test_run_chains_collects_every_failing_field():
    chains = [
        body("name", Required("Name is required"), IsString(), Trim()),
        body("email", Required("Email is required"), IsEmail()),
        body("age", OptionalField(), IsInt(min=0)),
        query("limite", OptionalField(), IsInt(min=1)),
    ]
    c = ctx(body={"name": "  Ana ", "email": "nope", "age": "-3"}, query={"limite": "2"})
    cleaned, errors = run_chains(chains, c)

    assert cleaned["body"] == {"name": "Ana"}
    assert cleaned["query"] == {"limite": 2}
    assert [(e["field"], e["value"]) for e in errors] == [("email", "nope"), ("age", "-3")]


def test_run_chains_stops_field_at_first_failure():
    calls = []

    def lookup(db, value):
        calls.append(value)

    chains = [param("id", IsInt(min=1), Check(lookup))]
    _, errors = run_chains(chains, ctx(params={"id": "abc"}))
    assert len(errors) == 1
    assert calls == []

    _, errors = run_chains(chains, ctx(params={"id": "4"}))
    assert errors == []
    assert calls == [4]


def test_check_passes_excluded_id():
    seen = {}

    def lookup(db, value, exclude_id=None):
        seen["exclude_id"] = exclude_id

    c = ctx(body={"email": "a@example.com"})
    c.cleaned["params"]["uid"] = 9
    run_chains([body("email", Check(lookup, exclude=lambda ctx: ctx.cleaned["params"].get("uid")))], c)
    assert seen == {"exclude_id": 9}


def test_raise_for_errors_prefers_validation_over_not_found():
    raise_for_errors([])

    bad = {"location": "body", "field": "name", "msg": "Name is required", "value": None, "status": 400}
    missing = {"location": "params", "field": "id", "msg": "No company exists with the given ID", "value": "7", "status": 404}

    with pytest.raises(ValidationError) as exc:
        raise_for_errors([missing, bad])
    assert exc.value.status_code == 400
    assert exc.value.detail["errors"] == [{"location": "body", "field": "name", "msg": "Name is required", "value": None}]

    with pytest.raises(NotFoundError) as exc:
        raise_for_errors([missing])
    assert exc.value.status_code == 404
