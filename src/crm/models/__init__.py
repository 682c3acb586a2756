"""Model registry.

Importing this package registers every table on ``Base.metadata`` and lets
string-based relationship targets resolve across domain modules.
"""

from src.crm.clients.models import ChecklistItem, Client, Document, Interaction
from src.crm.finances.models import Commission, FinancialGoal, Transaction
from src.crm.leads.models import Lead, LeadInteraction
from src.crm.models.user import User
from src.crm.notifications.models import DocumentRequest, EmailQueue, Meeting
from src.crm.properties.models import Property, SharedProperty
from src.crm.requirements.models import (
    GatheredProperty,
    PurchasePreferences,
    RentalPreferences,
    Requirement,
)
from src.crm.workflows.models import (
    ActionTask,
    ClientAction,
    Process,
    ProcessTask,
    Request,
    Stage,
)

__all__ = [
    "ActionTask",
    "ChecklistItem",
    "Client",
    "ClientAction",
    "Commission",
    "Document",
    "DocumentRequest",
    "EmailQueue",
    "FinancialGoal",
    "GatheredProperty",
    "Interaction",
    "Lead",
    "LeadInteraction",
    "Meeting",
    "Process",
    "ProcessTask",
    "Property",
    "PurchasePreferences",
    "RentalPreferences",
    "Request",
    "Requirement",
    "SharedProperty",
    "Stage",
    "Transaction",
    "User",
]
