"""
User directory service layer.

Services:
    UserService: Identity-keyed user records (ensure, lookup, presence,
        profile, duplicate reconciliation)

Design Principles:
    - Caller identity is an explicit parameter (users.identity.Identity)
    - Expected failures return ServiceResult.failure() with core ErrorCodes
    - Reads for anonymous callers return empty results instead of failing

Usage:
    from users.services import UserService

    result = UserService.ensure_user(identity)
    result = UserService.set_presence(identity.token_identifier, online=False)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db.models import Count

from core.services import BaseService, ErrorCode, ServiceResult
from users.models import User

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from users.identity import Identity


@dataclass
class ReconciliationResult:
    """
    Outcome of a duplicate reconciliation for one identity token.

    Attributes:
        kept: The surviving (most recently created) record
        removed_count: Number of older duplicates deleted
    """

    kept: User
    removed_count: int


def split_duplicates(records: Iterable[User]) -> tuple[User | None, list[User]]:
    """
    Pick the record to keep among duplicates of one identity token.

    The most recently created record wins; equal timestamps fall back to the
    higher id. Returns (kept, discarded).
    """
    ordered = sorted(records, key=lambda r: (r.created_at, r.id or 0), reverse=True)
    if not ordered:
        return None, []
    return ordered[0], ordered[1:]


class UserService(BaseService):
    """
    Service for user directory operations.

    Methods:
        ensure_user: Create the caller's record if absent
        get_current_user: Caller's record or None
        list_other_users: Every user except the caller
        set_presence: Toggle the online flag
        update_profile: Patch name and/or avatar
        reconcile_duplicates: Collapse the caller's duplicate records
        find_duplicate_groups: Report tokens with more than one record
        reconcile_all: Collapse duplicates for every token
    """

    @classmethod
    def ensure_user(cls, identity: Identity | None) -> ServiceResult[User]:
        """
        Create the caller's user record if it does not exist yet.

        Idempotent: an existing record is returned untouched. New records
        start online with profile fields taken from the identity claims.
        Concurrent first calls are settled by the unique constraint on
        token_identifier (get_or_create re-reads after an IntegrityError).

        Error codes:
            UNAUTHENTICATED: No identity presented
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        user, created = User.objects.get_or_create(
            token_identifier=identity.token_identifier,
            defaults={
                "name": identity.name or "",
                "email": identity.email or "",
                "image": identity.picture_url or "",
                "is_online": True,
            },
        )

        if created:
            cls.get_logger().info(
                f"Created user {user.id} for identity {identity.token_identifier}"
            )

        return ServiceResult.success(user)

    @classmethod
    def get_current_user(cls, identity: Identity | None) -> ServiceResult[User | None]:
        """
        Return the caller's record.

        A missing record or an anonymous caller is not an error: the
        result succeeds with data=None.
        """
        if identity is None:
            return ServiceResult.success(None)

        user = cls.get_by_token(identity.token_identifier)
        return ServiceResult.success(user)

    @classmethod
    def list_other_users(cls, identity: Identity | None) -> ServiceResult[QuerySet[User]]:
        """
        List every user except the caller.

        Error codes:
            UNAUTHENTICATED: No identity presented
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        users = User.objects.exclude(token_identifier=identity.token_identifier)
        return ServiceResult.success(users)

    @classmethod
    def set_presence(cls, token_identifier: str, online: bool) -> ServiceResult[User]:
        """
        Set the online flag for the user with the given identity token.

        Error codes:
            NOT_FOUND: No user record for the token
        """
        user = cls.get_by_token(token_identifier)
        if user is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        if user.is_online != online:
            user.is_online = online
            user.save(update_fields=["is_online", "updated_at"])
            cls.get_logger().debug(
                f"User {user.id} is now {'online' if online else 'offline'}"
            )

        return ServiceResult.success(user)

    @classmethod
    def update_profile(
        cls,
        token_identifier: str,
        name: str | None = None,
        image: str | None = None,
    ) -> ServiceResult[User]:
        """
        Patch the display name and/or avatar.

        Fields left as None are not touched.

        Error codes:
            VALIDATION_ERROR: Name is blank
            NOT_FOUND: No user record for the token
        """
        if name is not None:
            name = name.strip()
            if not name:
                return ServiceResult.failure(
                    "Name cannot be empty",
                    error_code=ErrorCode.VALIDATION_ERROR,
                    errors={"name": ["This field may not be blank."]},
                )

        user = cls.get_by_token(token_identifier)
        if user is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        update_fields = ["updated_at"]
        if name is not None:
            user.name = name
            update_fields.append("name")
        if image is not None:
            user.image = image
            update_fields.append("image")

        user.save(update_fields=update_fields)

        cls.get_logger().info(
            f"Updated profile of user {user.id}: {', '.join(update_fields[1:]) or 'no fields'}"
        )

        return ServiceResult.success(user)

    @classmethod
    def reconcile_duplicates(
        cls,
        identity: Identity | None,
    ) -> ServiceResult[ReconciliationResult]:
        """
        Collapse the caller's duplicate records into the most recent one.

        Error codes:
            UNAUTHENTICATED: No identity presented
            NOT_FOUND: The caller has no record at all
        """
        if identity is None:
            return ServiceResult.unauthenticated()

        result = cls.reconcile_token(identity.token_identifier)
        if result is None:
            return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)

        return ServiceResult.success(result)

    @classmethod
    def reconcile_token(cls, token_identifier: str) -> ReconciliationResult | None:
        """Keep the newest record for one token, delete the others."""
        kept, discarded = split_duplicates(
            User.objects.filter(token_identifier=token_identifier)
        )
        if kept is None:
            return None

        if discarded:
            with cls.atomic():
                User.objects.filter(id__in=[u.id for u in discarded]).delete()
            cls.get_logger().warning(
                f"Removed {len(discarded)} duplicate user record(s) for identity "
                f"{token_identifier}, kept user {kept.id}"
            )

        return ReconciliationResult(kept=kept, removed_count=len(discarded))

    @classmethod
    def find_duplicate_groups(cls) -> dict[str, list[User]]:
        """Map each identity token that has several records to those records."""
        tokens = (
            User.objects.values("token_identifier")
            .annotate(record_count=Count("id"))
            .filter(record_count__gt=1)
            .values_list("token_identifier", flat=True)
        )

        groups: dict[str, list[User]] = {}
        for user in User.objects.filter(token_identifier__in=list(tokens)):
            groups.setdefault(user.token_identifier, []).append(user)
        return groups

    @classmethod
    def reconcile_all(cls) -> int:
        """Reconcile every duplicated token. Returns the number of records removed."""
        removed = 0
        for token_identifier in cls.find_duplicate_groups():
            result = cls.reconcile_token(token_identifier)
            if result is not None:
                removed += result.removed_count
        return removed

    @classmethod
    def get_by_token(cls, token_identifier: str) -> User | None:
        """Newest record for a token (the only one once reconciled)."""
        return (
            User.objects.filter(token_identifier=token_identifier)
            .order_by("-created_at", "-id")
            .first()
        )
