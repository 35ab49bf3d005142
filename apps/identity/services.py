"""Account services used by admin tasks."""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from apps.core.problem import Problem
from .dtos import AccountOut

logger = logging.getLogger(__name__)


class AccountService:
    """User account operations bound to one task database handle."""

    def __init__(self, db, crypto):
        self.db = db
        self.crypto = crypto

    @property
    def users(self):
        return get_user_model().objects.using(self.db.alias)

    async def get_by_email(self, email: str):
        try:
            return await self.users.aget(email__iexact=email)
        except get_user_model().DoesNotExist:
            raise Problem(404, f"No account found with email {email}", details={'email': email})

    async def create(self, email: str, password: str) -> AccountOut:
        try:
            validate_email(email)
        except ValidationError:
            raise Problem(400, f"Invalid email address: {email}", details={'email': email})

        if await self.users.filter(email__iexact=email).aexists():
            raise Problem(409, f"An account with email {email} already exists", details={'email': email})

        if not password:
            raise Problem(400, "A password is required")

        user = get_user_model()(
            username=email,
            email=email,
            password=self.crypto.hash_password(password),
            is_active=True,
        )
        await user.asave(using=self.db.alias)
        logger.info(f"Created account {user.pk} for {email}")
        return AccountOut.from_user(user)

    async def promote(self, email: str) -> AccountOut:
        """Grant full administrator rights."""
        user = await self.get_by_email(email)
        user.is_staff = True
        user.is_superuser = True
        await user.asave(using=self.db.alias, update_fields=['is_staff', 'is_superuser'])
        logger.info(f"Promoted account {user.pk} to administrator")
        return AccountOut.from_user(user)

    async def set_password(self, email: str, password: str) -> AccountOut:
        if not password:
            raise Problem(400, "A new password is required")
        user = await self.get_by_email(email)
        user.password = self.crypto.hash_password(password)
        await user.asave(using=self.db.alias, update_fields=['password'])
        logger.info(f"Changed password for account {user.pk}")
        return AccountOut.from_user(user)
