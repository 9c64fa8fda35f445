"""
User directory app.

This app handles:
- One profile record per external identity token
- Online presence flag
- Profile updates (name, avatar)
- Reconciliation of legacy duplicate records
- Identity-provider webhooks (user sync, session presence)

Authentication itself is owned by the external identity provider. Requests
carry the provider's JWT; users.authentication turns it into an explicit
users.identity.Identity that every service receives as a parameter.

Usage:
    from users.services import UserService

    result = UserService.ensure_user(identity)
    if result.success:
        user = result.data
"""
