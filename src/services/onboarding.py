from dataclasses import dataclass
from enum import Enum
from typing import assert_never


class Role(str, Enum):
    STUDENT = "student"
    PARENT = "parent"
    TEACHER = "teacher"


@dataclass(frozen=True)
class RoleCard:
    role: Role
    title: str
    description: str


def parse_role(value: str) -> Role:
    try:
        return Role(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown role: {value!r}") from None


def role_card(role: Role) -> RoleCard:
    match role:
        case Role.STUDENT:
            return RoleCard(role, "I'm a Student", "I want Gabu to help with homework.")
        case Role.PARENT:
            return RoleCard(role, "I'm a Parent", "I want to track learning progress.")
        case Role.TEACHER:
            return RoleCard(role, "I'm a Teacher", "I want lesson support.")
        case _:
            assert_never(role)


def role_cards() -> list[RoleCard]:
    return [role_card(role) for role in Role]
