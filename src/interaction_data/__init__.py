"""Anonymous interaction data (KPI) collection for the login dialog."""

from interaction_data.mediator import Mediator
from interaction_data.messages import Message
from interaction_data.module import InteractionData
from interaction_data.session import Environment, SessionContext

__all__ = ["InteractionData", "Mediator", "Message", "Environment", "SessionContext"]
