# src/trigger_adapter/core/auth.py

from typing import Any, Dict, Optional

ADMIN = 'ADMIN'
USER = 'USER'
UNAUTHENTICATED = 'UNAUTHENTICATED'


def detect_auth_type(auth_claim: Optional[Dict[str, Any]]) -> str:
    """Classify an event's embedded auth claim"""
    auth_claim = auth_claim or {}
    if auth_claim.get('admin'):
        return ADMIN
    if auth_claim.get('variable'):
        return USER
    return UNAUTHENTICATED


def make_auth(auth_claim: Optional[Dict[str, Any]], auth_type: str) -> Optional[Dict[str, Any]]:
    """Build the user identity exposed to handlers (None when unauthenticated)"""
    if auth_type == UNAUTHENTICATED:
        return None
    variable = (auth_claim or {}).get('variable') or {}
    return {
        'uid': variable.get('uid'),
        'token': variable.get('token'),
    }


def apply_auth(context: Dict[str, Any]) -> Dict[str, Any]:
    """
    Enrich a context dict with `authType` and `auth`.

    ADMIN drops `auth` entirely; UNAUTHENTICATED sets it to an explicit None.

    Args:
        context: Canonical event context, modified in place

    Returns:
        The same context
    """
    claim = context.get('auth')
    auth_type = detect_auth_type(claim)
    context['authType'] = auth_type
    if auth_type == ADMIN:
        context.pop('auth', None)
    else:
        context['auth'] = make_auth(claim, auth_type)
    return context
