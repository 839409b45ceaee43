"""Known dialog error descriptors.

Error screens publish one of these descriptors as their ``action``; the name
translator reports the matching key rather than the free-form title.
"""
from __future__ import annotations
from typing import Any, Dict, Optional

KNOWN_ERRORS: Dict[str, Dict[str, Any]] = {
    "authenticate": {"title": "Authenticating User"},
    "addEmail": {"title": "Adding Address"},
    "addEmailWithAssertion": {"title": "Adding Primary Email Address to User"},
    "addressInfo": {"title": "Checking Address Info"},
    "authenticateWithAssertion": {"title": "Authenticating with Assertion"},
    "checkAuthentication": {"title": "Checking Authentication"},
    "cookiesDisabled": {"title": "Cookies Disabled"},
    "cookiesEnabled": {"title": "Checking if Cookies are Enabled"},
    "completeUserRegistration": {"title": "Completing User Registration"},
    "createUser": {"title": "Creating Account"},
    "getAssertion": {"title": "Getting Assertion"},
    "getTokenInfo": {"title": "Checking Registration Token"},
    "isEmailRegistered": {"title": "Checking Email Address"},
    "isUserAuthenticated": {"title": "Checking Authentication"},
    "logoutUser": {"title": "Logout Failed"},
    "offline": {"title": "You are offline!"},
    "primaryAuthentication": {"title": "Authenticating with Identity Provider"},
    "provisioningPrimary": {"title": "Provisioning with Identity Provider"},
    "registration": {"title": "Registration Failed"},
    "relaySetup": {"title": "Establishing Relay"},
    "requestPasswordReset": {"title": "Resetting Password"},
    "setPassword": {"title": "Setting Password"},
    "signIn": {"title": "Signin Failed"},
    "syncAddress": {"title": "Syncing Address"},
    "xhrError": {"title": "Communication Error"},
}


def error_key(action: Any, table: Optional[Dict[str, Dict[str, Any]]] = None) -> Optional[str]:
    """Return the key of ``table`` whose descriptor is ``action``, if any."""
    table = KNOWN_ERRORS if table is None else table
    for key, descriptor in table.items():
        if descriptor is action or descriptor == action:
            return key
    return None
