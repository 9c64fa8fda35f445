"""
Celery tasks for the user directory.

This module defines async tasks for:
- Applying identity provider events (user lifecycle, sessions)

Related files:
    - webhooks.py: Receives and queues the events
    - services.py: UserService that applies them

Usage:
    from users.tasks import process_identity_event
    process_identity_event.delay("session.created", {"user_id": "user_2x"})
"""

import logging

from celery import shared_task

from users.identity import Identity, token_identifier_for
from users.services import UserService

logger = logging.getLogger(__name__)

ONLINE_EVENTS = {"session.created"}
OFFLINE_EVENTS = {"session.ended", "session.removed"}


def _identity_from_user_payload(data: dict) -> Identity:
    full_name = " ".join(
        part for part in (data.get("first_name"), data.get("last_name")) if part
    )
    emails = data.get("email_addresses") or []
    email = data.get("email") or (emails[0].get("email_address", "") if emails else "")

    return Identity(
        token_identifier=token_identifier_for(str(data["id"])),
        name=data.get("name") or full_name,
        email=email or "",
        picture_url=data.get("image_url") or "",
    )


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
    acks_late=True,
)
def process_identity_event(self, event_type: str, data: dict) -> dict:
    """
    Apply one identity provider event.

    Args:
        event_type: Provider event type (user.created, session.ended, ...)
        data: Event payload

    Returns:
        Dict with processing result status
    """
    logger.info(f"Processing identity event: {event_type}")

    if event_type in ONLINE_EVENTS or event_type in OFFLINE_EVENTS:
        subject = data.get("user_id")
        if not subject:
            logger.warning(f"Identity event {event_type} has no user_id")
            return {"status": "invalid", "event_type": event_type}

        result = UserService.set_presence(
            token_identifier_for(str(subject)),
            online=event_type in ONLINE_EVENTS,
        )
        if not result.success:
            logger.warning(f"Presence event for unknown user {subject}: {result.error}")
            return {"status": "user_not_found", "event_type": event_type}
        return {"status": "processed", "event_type": event_type, "user_id": result.data.id}

    if event_type in ("user.created", "user.updated"):
        if not data.get("id"):
            logger.warning(f"Identity event {event_type} has no id")
            return {"status": "invalid", "event_type": event_type}

        identity = _identity_from_user_payload(data)
        result = UserService.ensure_user(identity)

        if event_type == "user.updated":
            result = UserService.update_profile(
                identity.token_identifier,
                name=identity.name or None,
                image=identity.picture_url or None,
            )

        return {"status": "processed", "event_type": event_type, "user_id": result.data.id}

    logger.info(f"Unhandled identity event: {event_type}")
    return {"status": "ignored", "event_type": event_type}
