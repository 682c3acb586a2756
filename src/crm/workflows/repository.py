"""Workflow repositories -- client actions, stages and requests.

Provides:
- ActionRepository: onboarding and process actions attached to a client
- StageRepository: ordered client stages and their processes
- RequestRepository: purchase/rental/sale requests, their processes and tasks

Parents are resolved and ownership-checked by the API layer; methods here
receive the parent rows and scope every child lookup to them. Each
mutation writes its rows, the fan-out side effects and the Interaction in
one commit.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import Client
from src.crm.notifications.models import DocumentRequest, Meeting
from src.crm.workflows.automation import fan_out, queue_completion_email
from src.crm.workflows.models import (
    ActionCategory,
    ActionTask,
    ClientAction,
    Process,
    ProcessTask,
    Request,
    Stage,
    TaskType,
    WorkStatus,
)
from src.crm.workflows.schemas import (
    ActionCreate,
    ProcessCreate,
    ProcessUpdate,
    StageCreate,
    StageUpdate,
)
from src.crm.workflows.templates import default_processes

logger = structlog.get_logger(__name__)


def _completed_at(status: str) -> datetime | None:
    return datetime.now(timezone.utc) if status == WorkStatus.COMPLETED.value else None


# ── Client Actions ──────────────────────────────────────────────────────────


class ActionRepository:
    """Onboarding and process actions for a client."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _reload(self, ids: list[uuid.UUID]) -> list[ClientAction]:
        result = await self._session.execute(
            select(ClientAction)
            .where(ClientAction.id.in_(ids))
            .order_by(ClientAction.created_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_actions(self, client_id: uuid.UUID, category: ActionCategory) -> list[ClientAction]:
        result = await self._session.execute(
            select(ClientAction)
            .where(ClientAction.client_id == client_id, ClientAction.category == category.value)
            .order_by(ClientAction.created_at)
        )
        return list(result.scalars().all())

    async def get_action(
        self, client_id: uuid.UUID, action_id: uuid.UUID, category: ActionCategory
    ) -> ClientAction | None:
        result = await self._session.execute(
            select(ClientAction).where(
                ClientAction.id == action_id,
                ClientAction.client_id == client_id,
                ClientAction.category == category.value,
            )
        )
        return result.scalar_one_or_none()

    def _build(self, client: Client, category: ActionCategory, data: ActionCreate, subject: str) -> ClientAction:
        task_types = [task.type for task in data.automated_tasks]
        action = ClientAction(
            client_id=client.id,
            category=category.value,
            title=data.title,
            description=data.description,
            type=data.type.value,
            status=WorkStatus.PENDING.value,
            due_date=data.due_date,
            tasks=[ActionTask(type=t.value, status=WorkStatus.PENDING.value) for t in task_types],
        )
        self._session.add(action)
        fan_out(
            self._session,
            client,
            title=data.title,
            description=data.description,
            task_types=task_types,
            email_subject=subject,
            source=category.value,
        )
        return action

    async def start_onboarding(self, client: Client, actions: list[ActionCreate]) -> list[ClientAction]:
        """Create a batch of onboarding actions with their automated side effects."""
        created = [
            self._build(client, ActionCategory.ONBOARDING, data, f"{data.title} - Action Required")
            for data in actions
        ]
        add_interaction(
            self._session,
            client.id,
            "Onboarding",
            "Onboarding process initiated",
            notes=f"Initiated {len(created)} onboarding actions",
        )
        await self._session.commit()
        logger.info("onboarding_started", client_id=str(client.id), actions=len(created))
        return await self._reload([a.id for a in created])

    async def create_action(self, client: Client, category: ActionCategory, data: ActionCreate) -> ClientAction:
        action = self._build(client, category, data, f"Action Required: {data.title}")
        if category == ActionCategory.ONBOARDING:
            add_interaction(self._session, client.id, "Onboarding", f"Added onboarding action: {data.title}")
        else:
            add_interaction(self._session, client.id, "Process", f"Added process: {data.title}")
        await self._session.commit()
        (reloaded,) = await self._reload([action.id])
        return reloaded

    async def update_status(
        self,
        client: Client,
        action: ClientAction,
        status: WorkStatus,
        notes: str | None = None,
    ) -> ClientAction:
        """Set an action's status; completion stamps completed_at and emails the client."""
        action.status = status.value
        action.completed_at = _completed_at(status.value)
        if notes is not None:
            action.notes = notes

        if status == WorkStatus.COMPLETED:
            queue_completion_email(self._session, client, action.title, source=action.category)

        if action.category == ActionCategory.ONBOARDING.value:
            description = f'Onboarding action "{action.title}" marked as {status.value}'
            interaction_type = "Onboarding"
        else:
            description = f'Process action "{action.title}" marked as {status.value}'
            interaction_type = "Process"
        add_interaction(self._session, client.id, interaction_type, description, notes=notes)
        await self._session.commit()
        (reloaded,) = await self._reload([action.id])
        return reloaded

    async def onboarding_overview(self, client_id: uuid.UUID) -> dict:
        """Onboarding actions with the document requests and meetings they produced."""
        actions = await self.list_actions(client_id, ActionCategory.ONBOARDING)
        doc_requests = await self._session.execute(
            select(DocumentRequest)
            .where(DocumentRequest.client_id == client_id)
            .order_by(DocumentRequest.created_at.desc())
        )
        meetings = await self._session.execute(
            select(Meeting).where(Meeting.client_id == client_id).order_by(Meeting.created_at.desc())
        )
        return {
            "actions": actions,
            "document_requests": list(doc_requests.scalars().all()),
            "meetings": list(meetings.scalars().all()),
            "progress": {
                "total": len(actions),
                "completed": sum(1 for a in actions if a.status == WorkStatus.COMPLETED.value),
            },
        }


# ── Stages ──────────────────────────────────────────────────────────────────


def _build_process(data: ProcessCreate, **parent: uuid.UUID) -> Process:
    return Process(
        title=data.title,
        description=data.description,
        type=data.type.value,
        status=WorkStatus.PENDING.value,
        due_date=data.due_date,
        tasks=[
            ProcessTask(type=task.type.value, status=WorkStatus.PENDING.value)
            for task in data.automated_tasks
        ],
        **parent,
    )


class StageRepository:
    """Client stages, their processes and process tasks."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _reload(self, stage_id: uuid.UUID) -> Stage:
        result = await self._session.execute(
            select(Stage).where(Stage.id == stage_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _reload_process(self, process_id: uuid.UUID) -> Process:
        result = await self._session.execute(
            select(Process).where(Process.id == process_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    def _fan_out_process(self, client: Client, process: ProcessCreate) -> None:
        fan_out(
            self._session,
            client,
            title=process.title,
            description=process.description,
            task_types=[task.type for task in process.automated_tasks],
            email_subject=f"New Process: {process.title}",
            source="stage",
        )

    async def list_stages(self, client_id: uuid.UUID) -> list[Stage]:
        result = await self._session.execute(
            select(Stage).where(Stage.client_id == client_id).order_by(Stage.order.asc())
        )
        return list(result.scalars().all())

    async def get_stage(self, client_id: uuid.UUID, stage_id: uuid.UUID) -> Stage | None:
        result = await self._session.execute(
            select(Stage).where(Stage.id == stage_id, Stage.client_id == client_id)
        )
        return result.scalar_one_or_none()

    async def create_stage(self, client: Client, data: StageCreate) -> Stage:
        """Append a stage after the client's last one, with nested processes."""
        max_order = await self._session.scalar(
            select(func.max(Stage.order)).where(Stage.client_id == client.id)
        )
        stage = Stage(
            client_id=client.id,
            title=data.title,
            description=data.description,
            order=0 if max_order is None else max_order + 1,
            status="ACTIVE",
            processes=[_build_process(p) for p in data.processes],
        )
        self._session.add(stage)
        for process in data.processes:
            self._fan_out_process(client, process)
        await self._session.flush()

        add_interaction(
            self._session, client.id, "Stage", f'Stage "{stage.title}" created', stage_id=stage.id
        )
        await self._session.commit()
        logger.info("stage_created", client_id=str(client.id), stage_id=str(stage.id), order=stage.order)
        return await self._reload(stage.id)

    async def update_stage(self, client: Client, stage: Stage, data: StageUpdate) -> Stage:
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is not None:
                setattr(stage, field, value)
        if data.status is not None:
            stage.end_date = datetime.now(timezone.utc) if data.status == "COMPLETED" else None
            add_interaction(
                self._session,
                client.id,
                "Stage",
                f'Stage "{stage.title}" marked as {data.status}',
                stage_id=stage.id,
            )
        await self._session.commit()
        return await self._reload(stage.id)

    async def delete_stage(self, stage: Stage) -> None:
        """Delete a stage; processes, requirements, documents and checklist cascade."""
        await self._session.execute(delete(Stage).where(Stage.id == stage.id))
        await self._session.commit()

    # ── Stage Processes ──────────────────────────────────────────────────

    async def get_process(self, stage: Stage, process_id: uuid.UUID) -> Process | None:
        result = await self._session.execute(
            select(Process).where(Process.id == process_id, Process.stage_id == stage.id)
        )
        return result.scalar_one_or_none()

    async def add_process(self, client: Client, stage: Stage, data: ProcessCreate) -> Process:
        process = _build_process(data, stage_id=stage.id)
        self._session.add(process)
        self._fan_out_process(client, data)
        add_interaction(
            self._session, client.id, "Process", f"Added process: {data.title}", stage_id=stage.id
        )
        await self._session.commit()
        return await self._reload_process(process.id)

    async def delete_process(self, stage: Stage, process_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(Process).where(Process.id == process_id, Process.stage_id == stage.id)
        )
        await self._session.commit()
        return result.rowcount > 0

    async def update_process_status(
        self, client: Client, stage: Stage, process: Process, status: WorkStatus, notes: str | None = None
    ) -> Process:
        process.status = status.value
        process.completed_at = _completed_at(status.value)
        if notes is not None:
            process.notes = notes
        add_interaction(
            self._session,
            client.id,
            "Process",
            f'Process "{process.title}" marked as {status.value}',
            stage_id=stage.id,
        )
        await self._session.commit()
        return await self._reload_process(process.id)

    async def update_process_task(
        self,
        client: Client,
        stage: Stage,
        process: Process,
        task_id: uuid.UUID,
        status: WorkStatus,
        notes: str | None = None,
    ) -> ProcessTask | None:
        """Set a task's status; completion emails the client."""
        task = await self._session.scalar(
            select(ProcessTask).where(ProcessTask.id == task_id, ProcessTask.process_id == process.id)
        )
        if task is None:
            return None
        task.status = status.value
        task.completed_at = _completed_at(status.value)
        if notes is not None:
            task.notes = notes
        if status == WorkStatus.COMPLETED:
            queue_completion_email(self._session, client, process.title, source="stage")
        add_interaction(
            self._session,
            client.id,
            "Process",
            f'Task "{process.title}" ({task.type}) marked as {status.value}',
            stage_id=stage.id,
        )
        await self._session.commit()
        return task


# ── Requests ────────────────────────────────────────────────────────────────


class RequestRepository:
    """Client requests, their processes and tasks."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _reload(self, request_id: uuid.UUID) -> Request:
        result = await self._session.execute(
            select(Request).where(Request.id == request_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _reload_process(self, process_id: uuid.UUID) -> Process:
        result = await self._session.execute(
            select(Process).where(Process.id == process_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_requests(self, client_id: uuid.UUID) -> list[Request]:
        result = await self._session.execute(
            select(Request).where(Request.client_id == client_id).order_by(Request.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_request(self, client_id: uuid.UUID, request_id: uuid.UUID) -> Request | None:
        result = await self._session.execute(
            select(Request).where(Request.id == request_id, Request.client_id == client_id)
        )
        return result.scalar_one_or_none()

    async def create_request(self, client_id: uuid.UUID, request_type: str) -> Request:
        """Create a request seeded with the default processes for its type.

        Seeded processes get PENDING tasks but no fan-out; side effects are
        triggered only by processes the agent adds explicitly.
        """
        request = Request(client_id=client_id, type=request_type, status="ACTIVE")
        self._session.add(request)
        await self._session.flush()

        for template in default_processes(request_type):
            self._session.add(
                Process(
                    request_id=request.id,
                    title=template.title,
                    description=template.description,
                    type=template.type.value,
                    status=WorkStatus.PENDING.value,
                    tasks=[
                        ProcessTask(type=t.value, status=WorkStatus.PENDING.value)
                        for t in template.automated_tasks
                    ],
                )
            )
        add_interaction(
            self._session,
            client_id,
            "REQUEST_CREATED",
            f"New {request_type} request created",
            request_id=request.id,
        )
        await self._session.commit()
        logger.info("request_created", client_id=str(client_id), request_id=str(request.id), type=request_type)
        return await self._reload(request.id)

    async def update_status(self, request: Request, status: str) -> Request:
        request.status = status
        add_interaction(
            self._session,
            request.client_id,
            "REQUEST_STATUS_CHANGED",
            f"Request status changed to {status}",
            request_id=request.id,
        )
        await self._session.commit()
        return await self._reload(request.id)

    async def delete_request(self, request: Request) -> None:
        """Delete a request; its processes, requirements and checklist cascade."""
        add_interaction(self._session, request.client_id, "REQUEST_DELETED", "Request deleted")
        await self._session.execute(delete(Request).where(Request.id == request.id))
        await self._session.commit()

    # ── Request Processes ────────────────────────────────────────────────

    async def list_processes(self, request: Request) -> list[Process]:
        result = await self._session.execute(
            select(Process).where(Process.request_id == request.id).order_by(Process.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_process(self, request: Request, process_id: uuid.UUID) -> Process | None:
        result = await self._session.execute(
            select(Process).where(Process.id == process_id, Process.request_id == request.id)
        )
        return result.scalar_one_or_none()

    async def create_process(self, client: Client, request: Request, data: ProcessCreate) -> Process:
        process = _build_process(data, request_id=request.id)
        self._session.add(process)
        fan_out(
            self._session,
            client,
            title=data.title,
            description=data.description,
            task_types=[task.type for task in data.automated_tasks],
            email_subject=f"New Process: {data.title}",
            source="request",
        )
        add_interaction(
            self._session,
            client.id,
            "PROCESS_CREATED",
            f'Process "{data.title}" created',
            request_id=request.id,
        )
        await self._session.commit()
        return await self._reload_process(process.id)

    async def update_process(self, request: Request, process: Process, data: ProcessUpdate) -> Process:
        changes = data.model_dump(exclude_unset=True, exclude={"status"})
        for field, value in changes.items():
            if value is not None or field in ("due_date", "notes"):
                setattr(process, field, value)
        if data.status is not None:
            process.status = data.status.value
            process.completed_at = _completed_at(data.status.value)
            add_interaction(
                self._session,
                request.client_id,
                "PROCESS_STATUS_CHANGED",
                f'Process "{process.title}" status changed to {data.status.value}',
                request_id=request.id,
            )
        await self._session.commit()
        return await self._reload_process(process.id)

    async def delete_process(self, request: Request, process_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(Process).where(Process.id == process_id, Process.request_id == request.id)
        )
        await self._session.commit()
        return result.rowcount > 0

    # ── Process Tasks ────────────────────────────────────────────────────

    async def list_tasks(self, process: Process) -> list[ProcessTask]:
        result = await self._session.execute(
            select(ProcessTask)
            .where(ProcessTask.process_id == process.id)
            .order_by(ProcessTask.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_task(self, request: Request, process: Process, task_type: TaskType) -> ProcessTask:
        task = ProcessTask(process_id=process.id, type=task_type.value, status=WorkStatus.PENDING.value)
        self._session.add(task)
        add_interaction(
            self._session,
            request.client_id,
            "TASK_CREATED",
            f"New {task_type.value} task created",
            request_id=request.id,
        )
        await self._session.commit()
        return task

    async def update_task(
        self, process: Process, task_id: uuid.UUID, status: WorkStatus, notes: str | None = None
    ) -> ProcessTask | None:
        task = await self._session.scalar(
            select(ProcessTask).where(ProcessTask.id == task_id, ProcessTask.process_id == process.id)
        )
        if task is None:
            return None
        task.status = status.value
        task.completed_at = _completed_at(status.value)
        if notes is not None:
            task.notes = notes
        await self._session.commit()
        return task

    async def delete_task(self, process: Process, task_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(ProcessTask).where(ProcessTask.id == task_id, ProcessTask.process_id == process.id)
        )
        await self._session.commit()
        return result.rowcount > 0
