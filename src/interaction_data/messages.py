"""Names of the messages exchanged on the dialog mediator.

The collector subscribes to every message, so this enumeration is the input
surface of the recorder. Producers may still publish names that are not listed
here; those pass through the name table unchanged.
"""
from __future__ import annotations
from enum import Enum


class Message(str, Enum):
    # Collector bookkeeping
    START_TIME = "start_time"
    KPI_DATA = "kpi_data"
    CONTEXT_INFO = "context_info"
    SEND_COMPLETE = "interaction_data_send_complete"
    SEND_ERROR = "interaction_data_send_error"

    # Screens
    SERVICE = "service"
    CANCEL_STATE = "cancel_state"
    ERROR_SCREEN = "error_screen"

    # Window lifecycle
    PRIMARY_USER_AUTHENTICATING = "primary_user_authenticating"
    DOM_LOADING = "dom_loading"
    WINDOW_UNLOAD = "window_unload"
    CHANNEL_ESTABLISHED = "channel_established"
    USER_CAN_INTERACT = "user_can_interact"

    # Assertion generation
    GENERATE_ASSERTION = "generate_assertion"
    ASSERTION_GENERATED = "assertion_generated"

    # Address verification
    USER_STAGED = "user_staged"
    USER_CONFIRMED = "user_confirmed"
    EMAIL_STAGED = "email_staged"
    EMAIL_CONFIRMED = "email_confirmed"
    RESET_PASSWORD_STAGED = "reset_password_staged"
    RESET_PASSWORD_CONFIRMED = "reset_password_confirmed"
    REVERIFY_EMAIL_STAGED = "reverify_email_staged"
    REVERIFY_EMAIL_CONFIRMED = "reverify_email_confirmed"

    # Authentication
    NOTME = "notme"
    ENTER_PASSWORD = "enter_password"
    PASSWORD_SUBMIT = "password_submit"
    AUTHENTICATION_SUCCESS = "authentication_success"
    AUTHENTICATION_FAIL = "authentication_fail"

    # Network
    XHR_COMPLETE = "xhr_complete"


def message_name(msg: str | Message) -> str:
    return msg.value if isinstance(msg, Message) else str(msg)
