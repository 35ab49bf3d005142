"""DTOs for Identity app."""
from ninja import Schema


class AccountOut(Schema):
    id: int
    username: str
    email: str
    is_active: bool
    is_staff: bool
    is_superuser: bool

    @classmethod
    def from_user(cls, user) -> 'AccountOut':
        return cls(
            id=user.pk,
            username=user.get_username(),
            email=user.email,
            is_active=user.is_active,
            is_staff=user.is_staff,
            is_superuser=user.is_superuser,
        )
