"""Validation chains for the auth and user routes."""
from coperex.models.user import Role
from coperex.validation.chain import auth, body, param, query
from coperex.validation.predicates import (
    current_user_is_present,
    email_is_unique,
    not_last_active_admin,
    user_is_present,
    username_is_unique,
)
from coperex.validation.rules import (
    MAX_PAGE_SIZE,
    Check,
    Custom,
    IsEmail,
    IsIn,
    IsInt,
    IsString,
    MinLength,
    OptionalField,
    Required,
    RequiredUnless,
    RuleViolation,
    StrongPassword,
    Trim,
)

ROLES = [r.value for r in Role]


def _target_user(ctx):
    return ctx.cleaned["params"].get("uid")


def _current_user(ctx):
    return ctx.user.id if ctx.user is not None else None


def _role_change_allowed(value, ctx):
    if ctx.user is None or ctx.user.role != Role.ADMIN.value:
        raise RuleViolation("Only an administrator can change roles")


def _keeps_an_admin(target):
    """Reject taking the ADMIN role away from the last active administrator."""
    def check(value, ctx):
        uid = target(ctx)
        if value != Role.ADMIN.value and uid is not None:
            not_last_active_admin(ctx.db, uid)
    return check


def _profile_chains(exclude):
    """Optional profile fields shared by both update routes."""
    return [
        body("name", OptionalField(), IsString(), Trim(), Required("Name cannot be empty")),
        body("surname", OptionalField(), IsString(), Trim()),
        body("username", OptionalField(), IsString(), Trim(), Required("Username cannot be empty"),
             Check(username_is_unique, exclude=exclude)),
        body("email", OptionalField(), IsEmail(), Check(email_is_unique, exclude=exclude)),
        body("password", OptionalField(), StrongPassword()),
        body("phone", OptionalField(), IsString(), Trim()),
    ]


REGISTER = [
    body("name", Required("Name is required"), IsString(), Trim()),
    body("surname", OptionalField(), IsString(), Trim()),
    body("username", Required("Username is required"), IsString(), Trim(), Check(username_is_unique)),
    body("email", Required("Email is required"), IsEmail(), Check(email_is_unique)),
    body("password", Required("Password is required"), StrongPassword()),
    body("phone", OptionalField(), IsString(), Trim()),
    body("role", Required("Role is required"), IsIn([Role.ADMIN.value], "Only the ADMIN role is allowed")),
]

LOGIN = [
    body("email", OptionalField(), IsEmail()),
    body("username", RequiredUnless("email", "Email or username is required"), IsString("Username has an invalid format"), Trim()),
    body("password", Required("Password is required"), MinLength(4, "Password must be at least 4 characters long")),
]

LIST_USERS = [
    query("limite", OptionalField(), IsInt(min=1, max=MAX_PAGE_SIZE, message=f"limite must be an integer between 1 and {MAX_PAGE_SIZE}")),
    query("desde", OptionalField(), IsInt(min=0, message="desde must be a non-negative integer")),
]

GET_USER = [
    param("uid", IsInt(min=1, message="Not a valid ID"), Check(user_is_present)),
]

ADMIN_UPDATE_USER = [
    *GET_USER,
    *_profile_chains(_target_user),
    body("role", OptionalField(), IsIn(ROLES), Custom(_keeps_an_admin(_target_user))),
]

SELF_UPDATE_USER = [
    *_profile_chains(_current_user),
    body("role", OptionalField(), Custom(_role_change_allowed), IsIn(ROLES),
         Custom(_keeps_an_admin(_current_user))),
]

DELETE_SELF = [
    auth("user", Required("User not found"), Check(current_user_is_present),
         Check(not_last_active_admin)),
]
