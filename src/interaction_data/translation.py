"""Translation from mediator message names to KPI reporting names.

Each entry of a name table is a tagged rule:

    PassThrough()   keep the mediator name
    Rename(name)    report under ``name``
    Compute(fn)     ``fn(msg, data)`` returns the name, or None to drop the event

Explanation of the reporting names:

    screen.*                   the user sees a new screen
    window.redirect_to_primary the user is redirected to their IdP
    window.unload              the last thing in every event stream
    generate_assertion /
    assertion_generated        bracket assertion generation (crypto timing)
    user.user_staged /
    user.user_confirmed        a verification email was sent / confirmed
    user.email_staged /
    user.email_confirmed       same, for a secondary address
    user.logout                the user clicked "this is not me"
    xhr_complete.<METHOD><path> network traffic
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from interaction_data.errors import error_key
from interaction_data.messages import Message

logger = logging.getLogger(__name__)

MALFORMED_XHR = "xhr.malformed_report"


@dataclass(frozen=True)
class PassThrough:
    pass


@dataclass(frozen=True)
class Rename:
    name: str


@dataclass(frozen=True)
class Compute:
    fn: Callable[[str, Any], Optional[str]]


NameRule = Union[PassThrough, Rename, Compute]
NameTable = Mapping[str, NameRule]


def remove_get_data(msg: str, data: Any) -> str:
    network = data.get("network") if isinstance(data, Mapping) else None
    if msg and isinstance(network, Mapping) and network.get("type") and network.get("url"):
        return f"{msg}.{network['type']}{str(network['url']).split('?')[0]}"
    return MALFORMED_XHR


def parse_error_screen(msg: str, data: Any) -> str:
    data = data if isinstance(data, Mapping) else {}
    parts: list[str] = []

    action = data.get("action")
    if action:
        title = action.get("title") if isinstance(action, Mapping) else None
        parts.append(error_key(action) or title or "unknown")

    network = data.get("network")
    status = network.get("status") if isinstance(network, Mapping) else None
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    if status is not None and status > 399:
        parts.append(str(status))

    if not parts:
        parts.append("unknown")

    return "screen.error." + ".".join(parts)


def _screen(msg: str, data: Any) -> Optional[str]:
    name = data.get("name") if isinstance(data, Mapping) else None
    return f"screen.{name or 'unknown'}"


def _drop(msg: str, data: Any) -> None:
    return None


DROP = Compute(_drop)

DEFAULT_NAME_TABLE: dict[str, NameRule] = {
    # bookkeeping of the collector itself is never part of the stream
    Message.START_TIME.value: DROP,
    Message.KPI_DATA.value: DROP,
    Message.CONTEXT_INFO.value: DROP,
    Message.SEND_COMPLETE.value: DROP,
    Message.SEND_ERROR.value: DROP,

    Message.SERVICE.value: Compute(_screen),
    Message.CANCEL_STATE.value: Rename("screen.cancel"),
    Message.PRIMARY_USER_AUTHENTICATING.value: Rename("window.redirect_to_primary"),
    Message.DOM_LOADING.value: Rename("window.dom_loading"),
    Message.WINDOW_UNLOAD.value: Rename("window.unload"),
    Message.CHANNEL_ESTABLISHED.value: Rename("window.channel_established"),
    Message.USER_CAN_INTERACT.value: Rename("user.can_interact"),
    Message.GENERATE_ASSERTION.value: PassThrough(),
    Message.ASSERTION_GENERATED.value: PassThrough(),
    Message.USER_STAGED.value: Rename("user.user_staged"),
    Message.USER_CONFIRMED.value: Rename("user.user_confirmed"),
    Message.EMAIL_STAGED.value: Rename("user.email_staged"),
    Message.EMAIL_CONFIRMED.value: Rename("user.email_confirmed"),
    Message.RESET_PASSWORD_STAGED.value: Rename("user.reset_password_staged"),
    Message.RESET_PASSWORD_CONFIRMED.value: Rename("user.reset_password_confirmed"),
    Message.REVERIFY_EMAIL_STAGED.value: Rename("user.reverify_email_staged"),
    Message.REVERIFY_EMAIL_CONFIRMED.value: Rename("user.reverify_email_confirmed"),
    Message.NOTME.value: Rename("user.logout"),
    Message.ENTER_PASSWORD.value: Rename("authenticate.enter_password"),
    Message.PASSWORD_SUBMIT.value: Rename("authenticate.password_submitted"),
    Message.AUTHENTICATION_SUCCESS.value: Rename("authenticate.password_success"),
    Message.AUTHENTICATION_FAIL.value: Rename("authenticate.password_fail"),
    Message.XHR_COMPLETE.value: Compute(remove_get_data),
    Message.ERROR_SCREEN.value: Compute(parse_error_screen),
}


def as_rule(value: Any) -> NameRule:
    """Coerce the loose None/str/callable notation into a tagged rule."""
    if isinstance(value, (PassThrough, Rename, Compute)):
        return value
    if value is None:
        return PassThrough()
    if isinstance(value, str):
        return Rename(value)
    if callable(value):
        return Compute(value)
    raise TypeError(f"unsupported name rule: {value!r}")


def build_name_table(raw: Mapping[str, Any]) -> dict[str, NameRule]:
    return {str(k): as_rule(v) for k, v in raw.items()}


_reported_unknown: set[str] = set()


def translate(table: NameTable, msg: str, data: Any = None, strict: bool = False) -> Optional[str]:
    """Return the reporting name for ``msg``, or None if the event is dropped."""
    rule = table.get(msg)
    if rule is None:
        if strict and msg not in _reported_unknown:
            _reported_unknown.add(msg)
            logger.warning("no KPI name rule for message '%s', passing through", msg)
        return msg
    if isinstance(rule, PassThrough):
        return msg
    if isinstance(rule, Rename):
        return rule.name
    if isinstance(rule, Compute):
        return rule.fn(msg, data)
    raise TypeError(f"unsupported name rule: {rule!r}")
