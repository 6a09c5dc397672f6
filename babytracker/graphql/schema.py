"""GraphQL schema exposing the same operations as the REST API.

Domain errors surface as GraphQL errors with ``extensions.code`` and, like
on REST, decide the HTTP status of the response.
"""

import dataclasses
import logging
import uuid

import strawberry
from pydantic import ValidationError as PydanticValidationError
from strawberry.extensions import SchemaExtension
from strawberry.types.graphql import OperationType

from babytracker.core.exceptions import (
    BabyTrackerError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from babytracker.graphql.types import (
    BabyType,
    CreateBabyInput,
    CreateFamilyInput,
    FamilyMemberType,
    FamilyType,
    FeedEntryType,
    InvitationType,
    InviteMemberInput,
    NewBabyEntryInput,
    NewSleepEntryInput,
    SleepSessionType,
    UpdateBabyEntryInput,
    UpdateBabyInput,
    UpdateFamilyInput,
    UpdateMemberInput,
    UpdateSleepEntryInput,
)
from babytracker.schemas.baby import BabyCreate, BabyUpdate
from babytracker.schemas.common import parse_date, parse_time
from babytracker.schemas.family import FamilyCreate, FamilyUpdate, MemberUpdate
from babytracker.schemas.feed_entry import FeedEntryCreate, FeedEntryUpdate
from babytracker.schemas.invitation import InvitationCreate
from babytracker.schemas.sleep_session import SleepSessionCreate, SleepSessionUpdate
from babytracker.services import (
    baby_service,
    family_service,
    feed_entry_service,
    invitation_service,
    sleep_service,
)

logger = logging.getLogger(__name__)

# First matching code wins when a response carries several errors.
_STATUS_PRIORITY = (
    NotFoundError,
    ValidationError,
    ForbiddenError,
    ConflictError,
    UnauthenticatedError,
)


def _validate(schema_cls, data):
    """Run a strawberry input through its pydantic request schema."""
    if dataclasses.is_dataclass(data):
        data = dataclasses.asdict(data)
    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"{field}: {error['msg']}") from exc


async def _feed_entries(info: strawberry.Info, func, *args) -> list[FeedEntryType]:
    ctx = info.context
    async with ctx.db_lock:
        result = await func(ctx.db, ctx.caller, *args)
        entries = result if isinstance(result, list) else [result]
        responses = await feed_entry_service.feed_entry_responses(ctx.db, entries)
    return [FeedEntryType.from_response(r) for r in responses]


async def _sleep_sessions(info: strawberry.Info, func, *args) -> list[SleepSessionType]:
    ctx = info.context
    async with ctx.db_lock:
        result = await func(ctx.db, ctx.caller, *args)
        if result is None:
            return []
        sessions = result if isinstance(result, list) else [result]
        responses = await sleep_service.sleep_session_responses(ctx.db, sessions)
    return [SleepSessionType.from_response(r) for r in responses]


@strawberry.type
class Query:
    # Families ---------------------------------------------------------------

    @strawberry.field
    async def user_families(self, info: strawberry.Info) -> list[FamilyType]:
        families = await info.context.run(family_service.list_user_families)
        return [FamilyType.from_model(f) for f in families]

    @strawberry.field
    async def family(self, info: strawberry.Info, family_id: uuid.UUID) -> FamilyType:
        family = await info.context.run(family_service.get_family, family_id)
        return FamilyType.from_model(family)

    @strawberry.field
    async def family_babies(self, info: strawberry.Info, family_id: uuid.UUID) -> list[BabyType]:
        babies = await info.context.run(baby_service.list_family_babies, family_id)
        return [BabyType.from_model(b) for b in babies]

    @strawberry.field
    async def baby(self, info: strawberry.Info, baby_id: uuid.UUID) -> BabyType:
        return BabyType.from_model(await info.context.run(baby_service.get_baby, baby_id))

    @strawberry.field
    async def family_members(
        self, info: strawberry.Info, family_id: uuid.UUID,
    ) -> list[FamilyMemberType]:
        members = await info.context.run(family_service.list_family_members, family_id)
        return [FamilyMemberType.from_model(m) for m in members]

    # Invitations ------------------------------------------------------------

    @strawberry.field
    async def pending_invitations(self, info: strawberry.Info) -> list[InvitationType]:
        invitations = await info.context.run(invitation_service.list_pending_invitations)
        return [InvitationType.from_model(i) for i in invitations]

    @strawberry.field
    async def family_invitations(
        self, info: strawberry.Info, family_id: uuid.UUID,
    ) -> list[InvitationType]:
        invitations = await info.context.run(
            invitation_service.list_family_invitations, family_id,
        )
        return [InvitationType.from_model(i) for i in invitations]

    @strawberry.field
    async def invitation_by_token(self, info: strawberry.Info, token: str) -> InvitationType:
        ctx = info.context
        async with ctx.db_lock:
            invitation = await invitation_service.get_invitation_by_token(ctx.db, token)
        return InvitationType.from_model(invitation)

    # Feed entries -----------------------------------------------------------

    @strawberry.field
    async def baby_entries(self, info: strawberry.Info, baby_id: uuid.UUID) -> list[FeedEntryType]:
        return await _feed_entries(info, feed_entry_service.list_baby_feed_entries, baby_id)

    @strawberry.field
    async def baby_entries_by_date(
        self, info: strawberry.Info, baby_id: uuid.UUID, date: str,
    ) -> list[FeedEntryType]:
        return await _feed_entries(
            info, feed_entry_service.list_baby_feed_entries_by_date, baby_id, parse_date(date),
        )

    @strawberry.field
    async def baby_entries_by_date_range(
        self, info: strawberry.Info, baby_id: uuid.UUID, start_date: str, end_date: str,
    ) -> list[FeedEntryType]:
        return await _feed_entries(
            info, feed_entry_service.list_baby_feed_entries_by_range,
            baby_id, parse_date(start_date), parse_date(end_date),
        )

    @strawberry.field
    async def family_baby_entries(
        self, info: strawberry.Info, family_id: uuid.UUID,
    ) -> list[FeedEntryType]:
        return await _feed_entries(info, feed_entry_service.list_family_feed_entries, family_id)

    @strawberry.field
    async def all_user_baby_entries(self, info: strawberry.Info) -> list[FeedEntryType]:
        return await _feed_entries(info, feed_entry_service.list_user_feed_entries)

    @strawberry.field
    async def baby_entry(self, info: strawberry.Info, id: uuid.UUID) -> FeedEntryType:
        [entry] = await _feed_entries(info, feed_entry_service.get_feed_entry, id)
        return entry

    # Sleep sessions ---------------------------------------------------------

    @strawberry.field
    async def baby_sleep_entries(
        self, info: strawberry.Info, baby_id: uuid.UUID,
    ) -> list[SleepSessionType]:
        return await _sleep_sessions(info, sleep_service.list_baby_sleep_sessions, baby_id)

    @strawberry.field
    async def baby_sleep_entries_by_date(
        self, info: strawberry.Info, baby_id: uuid.UUID, date: str,
    ) -> list[SleepSessionType]:
        return await _sleep_sessions(
            info, sleep_service.list_baby_sleep_sessions_by_date, baby_id, parse_date(date),
        )

    @strawberry.field
    async def baby_sleep_entries_by_date_range(
        self, info: strawberry.Info, baby_id: uuid.UUID, start_date: str, end_date: str,
    ) -> list[SleepSessionType]:
        return await _sleep_sessions(
            info, sleep_service.list_baby_sleep_sessions_by_range,
            baby_id, parse_date(start_date), parse_date(end_date),
        )

    @strawberry.field
    async def family_sleep_entries(
        self, info: strawberry.Info, family_id: uuid.UUID,
    ) -> list[SleepSessionType]:
        return await _sleep_sessions(info, sleep_service.list_family_sleep_sessions, family_id)

    @strawberry.field
    async def all_user_sleep_entries(self, info: strawberry.Info) -> list[SleepSessionType]:
        return await _sleep_sessions(info, sleep_service.list_user_sleep_sessions)

    @strawberry.field
    async def baby_active_sleep(
        self, info: strawberry.Info, baby_id: uuid.UUID,
    ) -> SleepSessionType | None:
        sessions = await _sleep_sessions(info, sleep_service.get_active_sleep, baby_id)
        return sessions[0] if sessions else None

    @strawberry.field
    async def sleep_entry(self, info: strawberry.Info, id: uuid.UUID) -> SleepSessionType:
        [session] = await _sleep_sessions(info, sleep_service.get_sleep_session, id)
        return session


@strawberry.type
class Mutation:
    # Families ---------------------------------------------------------------

    @strawberry.mutation
    async def create_family(self, info: strawberry.Info, input: CreateFamilyInput) -> FamilyType:
        data = _validate(FamilyCreate, input)
        family = await info.context.run(
            family_service.create_family, data.name, data.owner_display_name,
        )
        return FamilyType.from_model(family)

    @strawberry.mutation
    async def update_family(
        self, info: strawberry.Info, family_id: uuid.UUID, input: UpdateFamilyInput,
    ) -> FamilyType:
        data = _validate(FamilyUpdate, input)
        family = await info.context.run(family_service.update_family, family_id, data.name)
        return FamilyType.from_model(family)

    @strawberry.mutation
    async def delete_family(self, info: strawberry.Info, family_id: uuid.UUID) -> bool:
        return await info.context.run(family_service.delete_family, family_id)

    # Babies -----------------------------------------------------------------

    @strawberry.mutation
    async def create_baby(
        self, info: strawberry.Info, family_id: uuid.UUID, input: CreateBabyInput,
    ) -> BabyType:
        data = _validate(BabyCreate, input)
        return BabyType.from_model(
            await info.context.run(baby_service.create_baby, family_id, data)
        )

    @strawberry.mutation
    async def update_baby(
        self, info: strawberry.Info, baby_id: uuid.UUID, input: UpdateBabyInput,
    ) -> BabyType:
        data = _validate(BabyUpdate, input)
        return BabyType.from_model(
            await info.context.run(baby_service.update_baby, baby_id, data)
        )

    @strawberry.mutation
    async def delete_baby(self, info: strawberry.Info, baby_id: uuid.UUID) -> bool:
        return await info.context.run(baby_service.delete_baby, baby_id)

    # Invitations and members ------------------------------------------------

    @strawberry.mutation
    async def invite_member(
        self, info: strawberry.Info, family_id: uuid.UUID, input: InviteMemberInput,
    ) -> InvitationType:
        data = _validate(InvitationCreate, input)
        invitation = await info.context.run(
            invitation_service.invite_member, family_id, data.email, data.role, data.message,
        )
        return InvitationType.from_model(invitation)

    @strawberry.mutation
    async def accept_invitation(self, info: strawberry.Info, token: str) -> FamilyMemberType:
        member = await info.context.run(invitation_service.accept_invitation, token)
        return FamilyMemberType.from_model(member)

    @strawberry.mutation
    async def decline_invitation(self, info: strawberry.Info, token: str) -> bool:
        await info.context.run(invitation_service.decline_invitation, token)
        return True

    @strawberry.mutation
    async def cancel_invitation(self, info: strawberry.Info, invitation_id: uuid.UUID) -> bool:
        return await info.context.run(invitation_service.cancel_invitation, invitation_id)

    @strawberry.mutation
    async def remove_member(
        self, info: strawberry.Info, family_id: uuid.UUID, member_id: uuid.UUID,
    ) -> bool:
        return await info.context.run(family_service.remove_member, family_id, member_id)

    @strawberry.mutation
    async def update_member(
        self,
        info: strawberry.Info,
        family_id: uuid.UUID,
        member_id: uuid.UUID,
        input: UpdateMemberInput,
    ) -> FamilyMemberType:
        data = _validate(MemberUpdate, input)
        member = await info.context.run(
            family_service.update_member, family_id, member_id,
            display_name=data.display_name, role=data.role,
        )
        return FamilyMemberType.from_model(member)

    # Feed entries -----------------------------------------------------------

    @strawberry.mutation
    async def create_baby_entry(
        self, info: strawberry.Info, input: NewBabyEntryInput,
    ) -> FeedEntryType:
        data = _validate(FeedEntryCreate, input)
        [entry] = await _feed_entries(info, feed_entry_service.create_feed_entry, data)
        return entry

    @strawberry.mutation
    async def update_baby_entry(
        self, info: strawberry.Info, entry_id: uuid.UUID, input: UpdateBabyEntryInput,
    ) -> FeedEntryType:
        data = _validate(FeedEntryUpdate, input)
        [entry] = await _feed_entries(
            info, feed_entry_service.update_feed_entry, entry_id, data,
        )
        return entry

    @strawberry.mutation
    async def delete_baby_entry(self, info: strawberry.Info, id: uuid.UUID) -> bool:
        return await info.context.run(feed_entry_service.delete_feed_entry, id)

    # Sleep sessions ---------------------------------------------------------

    @strawberry.mutation
    async def create_sleep_entry(
        self, info: strawberry.Info, input: NewSleepEntryInput,
    ) -> SleepSessionType:
        data = _validate(SleepSessionCreate, input)
        [session] = await _sleep_sessions(info, sleep_service.create_sleep_session, data)
        return session

    @strawberry.mutation
    async def update_sleep_entry(
        self, info: strawberry.Info, entry_id: uuid.UUID, input: UpdateSleepEntryInput,
    ) -> SleepSessionType:
        data = _validate(SleepSessionUpdate, input)
        [session] = await _sleep_sessions(
            info, sleep_service.update_sleep_session, entry_id, data,
        )
        return session

    @strawberry.mutation
    async def delete_sleep_entry(self, info: strawberry.Info, id: uuid.UUID) -> bool:
        return await info.context.run(sleep_service.delete_sleep_session, id)

    @strawberry.mutation
    async def stop_sleep(
        self, info: strawberry.Info, sleep_id: uuid.UUID, end_time: str, duration: int,
    ) -> SleepSessionType:
        if duration < 0:
            raise ValidationError("duration must not be negative")
        [session] = await _sleep_sessions(
            info, sleep_service.stop_sleep, sleep_id, parse_time(end_time), duration,
        )
        return session


class DomainErrorStatus(SchemaExtension):
    """Set the HTTP status of the response from the domain error it carries."""

    def on_execute(self):
        yield
        result = self.execution_context.result
        if result is None or not result.errors:
            return
        raised = [
            error.original_error for error in result.errors
            if isinstance(error.original_error, BabyTrackerError)
        ]
        for error_cls in _STATUS_PRIORITY:
            if any(isinstance(exc, error_cls) for exc in raised):
                self.execution_context.context.response.status_code = error_cls.status_code
                return


class MutationSavepoint(SchemaExtension):
    """Undo every write of a mutation document that ended with errors.

    Resolvers run inside one savepoint; the request session still commits
    afterwards, so only a clean document leaves changes behind.
    """

    async def on_execute(self):
        if self.execution_context.operation_type != OperationType.MUTATION:
            yield
            return
        db = self.execution_context.context.db
        savepoint = await db.begin_nested()
        try:
            yield
        except Exception:
            await savepoint.rollback()
            raise
        result = self.execution_context.result
        if result is not None and result.errors:
            logger.info("Mutation failed, rolling back %d error(s)", len(result.errors))
            await savepoint.rollback()
        else:
            await savepoint.commit()


class BabyTrackerSchema(strawberry.Schema):
    def process_errors(self, errors, execution_context=None) -> None:
        # Domain errors are expected outcomes; only log the rest.
        unexpected = [
            error for error in errors
            if not isinstance(error.original_error, BabyTrackerError)
        ]
        if unexpected:
            super().process_errors(unexpected, execution_context)


schema = BabyTrackerSchema(
    query=Query,
    mutation=Mutation,
    extensions=[MutationSavepoint, DomainErrorStatus],
)
