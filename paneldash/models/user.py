from dataclasses import dataclass


@dataclass
class User:
    """
    Dashboard user. The Store keeps raw dicts; we wrap them into objects
    so panel access rules live on the user, not in the views.
    """
    user_id: str
    name: str
    email: str

    is_authenticated = True

    def can_access_panel(self, panel) -> bool:
        """
        Return True when this user may enter the given panel. Every
        signed-in user may enter every panel; there is no role check.
        """
        return True

    @classmethod
    def from_dict(cls, d: dict | None):
        """Map a stored user dict to a user object."""
        if not d:
            return None
        return cls(user_id=d["user_id"], name=d.get("name", ""), email=d["email"])


class AnonymousUser:
    """Returned by the auth gate when a request carries no valid session."""

    user_id = None
    name = "Guest"
    email = None
    is_authenticated = False

    def can_access_panel(self, panel) -> bool:
        return False

    def __repr__(self) -> str:
        return "AnonymousUser()"


ANONYMOUS = AnonymousUser()
