"""Built-in workflow templates.

- STAGE_TEMPLATES: the standard buyer journey, offered when adding a stage
- ONBOARDING_TEMPLATES: Buyer / Seller onboarding action bundles
- DEFAULT_REQUEST_PROCESSES: processes seeded into every new request, by type

Templates are plain pydantic models so the API can serve them as-is and
the repositories can feed them straight into the create paths.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.crm.workflows.models import ProcessType, TaskType


class TemplateProcess(BaseModel):
    """A process (or client action) with the automated tasks it fans out."""

    title: str
    description: str
    type: ProcessType
    automated_tasks: list[TaskType] = Field(default_factory=list)


class StageTemplate(BaseModel):
    title: str
    description: str
    processes: list[TemplateProcess]


class OnboardingTemplate(BaseModel):
    name: str
    description: str
    actions: list[TemplateProcess]


STAGE_TEMPLATES: list[StageTemplate] = [
    StageTemplate(
        title="Buyer Consultation",
        description="Initial meeting to understand the buyer's needs and preferences",
        processes=[
            TemplateProcess(
                title="Initial Consultation Meeting",
                description="Schedule and conduct initial consultation meeting",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
            TemplateProcess(
                title="Requirements Documentation",
                description="Document buyer requirements and preferences",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.DOCUMENT_REQUEST],
            ),
        ],
    ),
    StageTemplate(
        title="Property Search",
        description="Active property search and viewings",
        processes=[
            TemplateProcess(
                title="Property Viewings",
                description="Schedule and conduct property viewings",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
        ],
    ),
    StageTemplate(
        title="Offer & Negotiation",
        description="Prepare and negotiate offers",
        processes=[
            TemplateProcess(
                title="Offer Preparation",
                description="Prepare and submit offer documents",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.DOCUMENT_REQUEST, TaskType.EMAIL],
            ),
        ],
    ),
    StageTemplate(
        title="Due Diligence",
        description="Property inspection and verification",
        processes=[
            TemplateProcess(
                title="Property Inspection",
                description="Schedule and conduct property inspection",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
        ],
    ),
    StageTemplate(
        title="Closing",
        description="Final steps to complete the purchase",
        processes=[
            TemplateProcess(
                title="Final Walkthrough",
                description="Schedule final property walkthrough",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
        ],
    ),
]


ONBOARDING_TEMPLATES: list[OnboardingTemplate] = [
    OnboardingTemplate(
        name="Buyer Onboarding",
        description="Standard onboarding for new buyers",
        actions=[
            TemplateProcess(
                title="Sign Buyer Representation Agreement",
                description="Review and sign the buyer representation agreement",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.EMAIL, TaskType.DOCUMENT_REQUEST],
            ),
            TemplateProcess(
                title="Initial Consultation Meeting",
                description="Discuss goals, budget and timeline",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
            TemplateProcess(
                title="Mortgage Pre-Approval",
                description="Provide mortgage pre-approval documentation",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.EMAIL, TaskType.DOCUMENT_REQUEST],
            ),
        ],
    ),
    OnboardingTemplate(
        name="Seller Onboarding",
        description="Standard onboarding for new sellers",
        actions=[
            TemplateProcess(
                title="Sign Listing Agreement",
                description="Review and sign the listing agreement",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.EMAIL, TaskType.DOCUMENT_REQUEST],
            ),
            TemplateProcess(
                title="Property Assessment Meeting",
                description="Walk through the property and agree on a listing price",
                type=ProcessType.MEETING,
                automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
            ),
            TemplateProcess(
                title="Collect Property Documents",
                description="Provide title deed, surveys and recent utility bills",
                type=ProcessType.DOCUMENT,
                automated_tasks=[TaskType.EMAIL, TaskType.DOCUMENT_REQUEST],
            ),
        ],
    ),
]


DEFAULT_REQUEST_PROCESSES: dict[str, list[TemplateProcess]] = {
    "PURCHASE": [
        TemplateProcess(
            title="Mortgage Pre-Approval",
            description="Collect proof of funds or a mortgage pre-approval letter",
            type=ProcessType.DOCUMENT,
            automated_tasks=[TaskType.DOCUMENT_REQUEST],
        ),
        TemplateProcess(
            title="Property Viewings",
            description="Schedule viewings for shortlisted properties",
            type=ProcessType.MEETING,
            automated_tasks=[TaskType.CALENDAR_INVITE],
        ),
        TemplateProcess(
            title="Offer Submission",
            description="Prepare and submit the purchase offer",
            type=ProcessType.DOCUMENT,
            automated_tasks=[TaskType.EMAIL],
        ),
    ],
    "RENTAL": [
        TemplateProcess(
            title="Rental Application",
            description="Collect ID, proof of income and references",
            type=ProcessType.DOCUMENT,
            automated_tasks=[TaskType.DOCUMENT_REQUEST],
        ),
        TemplateProcess(
            title="Property Viewings",
            description="Schedule viewings for shortlisted rentals",
            type=ProcessType.MEETING,
            automated_tasks=[TaskType.CALENDAR_INVITE],
        ),
        TemplateProcess(
            title="Lease Signing",
            description="Review and sign the lease agreement",
            type=ProcessType.DOCUMENT,
            automated_tasks=[TaskType.EMAIL],
        ),
    ],
    "SALE": [
        TemplateProcess(
            title="Listing Agreement",
            description="Sign the listing agreement",
            type=ProcessType.DOCUMENT,
            automated_tasks=[TaskType.DOCUMENT_REQUEST],
        ),
        TemplateProcess(
            title="Property Photography",
            description="Arrange photos and prepare the listing",
            type=ProcessType.TASK,
            automated_tasks=[TaskType.CALENDAR_INVITE],
        ),
        TemplateProcess(
            title="Open House",
            description="Schedule and announce an open house",
            type=ProcessType.MEETING,
            automated_tasks=[TaskType.CALENDAR_INVITE, TaskType.EMAIL],
        ),
    ],
}


def default_processes(request_type: str) -> list[TemplateProcess]:
    """Processes seeded into a new request; empty for unknown types."""
    return DEFAULT_REQUEST_PROCESSES.get(request_type.upper(), [])
