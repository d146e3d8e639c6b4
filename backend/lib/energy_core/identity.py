# backend/lib/energy_core/identity.py
from typing import Optional

# Used when an event carries no Cognito claims (local runs, tests, anonymous calls)
DEFAULT_USER_ID = "testuser"


def user_id_from_event(event: Optional[dict]) -> Optional[str]:
    """
    Return the Cognito `sub` claim from an API Gateway event, or None.

    Any missing level (no requestContext, no authorizer, no claims) is
    treated the same as an absent claim.
    """
    if not isinstance(event, dict):
        return None
    node = event
    for key in ('requestContext', 'authorizer', 'claims', 'sub'):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, str) and node:
        return node
    return None


def user_id_or_default(event: Optional[dict], default: str = DEFAULT_USER_ID) -> str:
    return user_id_from_event(event) or default
