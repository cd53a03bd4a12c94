"""Who is looking at the app, resolved once after sign-in."""

from dataclasses import dataclass

from evolve_support.client.errors import AuthRequired
from evolve_support.schemas.auth_schema import UserResponse


@dataclass(frozen=True)
class Guest:
    home_route = "/"
    screen = "login"
    can_manage_questions = False

    def require_user(self) -> UserResponse:
        raise AuthRequired()


@dataclass(frozen=True)
class Member:
    user: UserResponse

    home_route = "/"
    screen = "home"
    can_manage_questions = False

    def require_user(self) -> UserResponse:
        return self.user


@dataclass(frozen=True)
class Admin:
    user: UserResponse

    home_route = "/admin"
    screen = "admin_dashboard"
    can_manage_questions = True

    def require_user(self) -> UserResponse:
        return self.user


Viewer = Guest | Member | Admin


def resolve_viewer(user: UserResponse | None) -> Viewer:
    if user is None or not user.is_active:
        return Guest()
    match user.role:
        case "admin":
            return Admin(user)
        case _:
            return Member(user)
