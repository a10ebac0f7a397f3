"""
Ledger Engine

Monthly ledger lifecycle over a chain of independent per-month collections:
member CRUD, token assignment, winner declaration and advancing the roster
to the next month.

The store is injected; the engine keeps no ledger data in memory.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from core.constants import Defaults
from core.domain.draw_status import (
    DRAWN,
    NOT_DRAWN,
    Drawn,
    DrawStatus,
    NotDrawn,
    Winner,
    encode_draw_status,
)
from core.domain.errors import (
    AlreadySeededError,
    ConstraintViolation,
    DuplicateWinnerError,
    EmptyRosterError,
    EndOfSequenceError,
    InvariantViolation,
    LedgerError,
    NotFound,
    ValidationError,
)
from core.domain.member import PAYMENT_FIELDS, Member, MemberDraft, normalize_patch
from core.domain.months import MonthSequence
from core.types import PaymentStatus

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore

logger = logging.getLogger(__name__)


@dataclass
class TokenAudit:
    """Token consistency report of one month

    Attributes:
        month: audited month
        total_members: roster size
        missing: ids of members without a token
        duplicates: token -> ids sharing it
        gaps: token numbers absent from 1..max
    """

    month: str
    total_members: int
    missing: list[int] = field(default_factory=list)
    duplicates: dict[int, list[int]] = field(default_factory=dict)
    gaps: list[int] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not (self.missing or self.duplicates or self.gaps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "total_members": self.total_members,
            "missing": self.missing,
            "duplicates": {str(k): v for k, v in self.duplicates.items()},
            "gaps": self.gaps,
            "is_consistent": self.is_consistent,
        }


class LedgerEngine:
    """Ledger engine

    Args:
        store: ILedgerStore implementation (lifecycle owned by the caller)
        months: scheme month sequence; index 0 is the starting month
        paid_to_recipients: allowed ``paid_to`` values (None = any)
        enforce_winner_eligibility: only paid, tokened, not-drawn members
            may be declared winner

    Usage:
    ```python
    engine = LedgerEngine(store, MonthSequence.starting_at("september_2025"))

    await engine.add_member("september_2025", MemberDraft("Asha", "9876543210"))
    await engine.assign_tokens("september_2025")
    await engine.declare_winner("september_2025", member_id)
    next_month = await engine.advance_to_next_month("september_2025")
    ```
    """

    def __init__(
        self,
        store: ILedgerStore,
        months: MonthSequence,
        paid_to_recipients: Iterable[str] | None = None,
        enforce_winner_eligibility: bool = False,
    ):
        self.store = store
        self.months = months
        self.paid_to_recipients = (
            frozenset(paid_to_recipients) if paid_to_recipients else None
        )
        self.enforce_winner_eligibility = enforce_winner_eligibility
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, month: str) -> asyncio.Lock:
        lock = self._locks.get(month)
        if lock is None:
            lock = self._locks[month] = asyncio.Lock()
        return lock

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def list_members(self, month: str) -> list[Member]:
        """All members of `month` in canonical (case-insensitive name) order"""
        self.months.require(month)
        return await self.store.select(month, order_by="full_name")

    async def get_member(self, month: str, member_id: int) -> Member:
        """
        Raises:
            NotFound: no such member in `month`
        """
        self.months.require(month)
        members = await self.store.select(month, {"id": member_id})
        if not members:
            raise NotFound(
                f"Member {member_id} not found in {month}",
                month=month,
                member_id=member_id,
            )
        return members[0]

    async def add_member(
        self,
        month: str,
        draft: MemberDraft,
        share_family_mobile: bool = False,
    ) -> Member:
        """Add a member to the starting month

        Later months are only ever seeded as a whole by advance_to_next_month.

        Args:
            month: must be the starting month
            draft: new member fields; omitted fields take defaults
            share_family_mobile: reuse the mobile number of an existing
                member of the same family

        Raises:
            ValidationError: empty name/mobile or invalid field value
            InvariantViolation: `month` is not the starting month, or the
                draft sets the system-managed no_payment_required status or a
                winner marker
        """
        self.months.require(month)
        if not self.months.is_starting(month):
            raise InvariantViolation(
                f"Members can only be added to the starting month "
                f"({self.months.starting}), not {month}",
                month=month,
            )

        async with self._lock(month):
            if share_family_mobile:
                shared = await self._family_mobile(month, draft.family)
                if shared:
                    draft = replace(draft, mobile_number=shared)

            try:
                record = draft.to_record()
            except ValidationError as e:
                e.month = month
                raise

            if record["payment_status"] == PaymentStatus.NO_PAYMENT_REQUIRED:
                raise InvariantViolation(
                    "no_payment_required is managed by the system",
                    month=month,
                    field="payment_status",
                )
            if isinstance(record["draw_status"], Winner):
                raise InvariantViolation(
                    f"Winners are set by the draw, not by adding {record['full_name']}",
                    month=month,
                    field="draw_status",
                )

            self._check_recipient(month, None, record.get("paid_to"))
            if record.get("token_number") is not None:
                await self._check_token_free(month, None, record["token_number"])

            member = await self._write(month, None, self.store.insert(month, record))

        logger.info(f"Member added: {member.full_name} (id={member.id}) in {month}")
        return member

    async def update_member(
        self,
        month: str,
        member_id: int,
        patch: Mapping[str, Any],
        share_family_mobile: bool = False,
    ) -> Member:
        """Merge `patch` into a member record

        Payment fields of a member that has won (or is exempt from payment)
        are locked.

        Raises:
            NotFound: no such member in `month`
            ValidationError: unknown field or invalid value
            InvariantViolation: payment edit on a locked record, setting
                the system-managed no_payment_required status, setting a
                winner marker, or changing the draw status of a member who
                has won
        """
        self.months.require(month)
        async with self._lock(month):
            return await self._update(month, member_id, patch, share_family_mobile)

    async def delete_member(self, month: str, member_id: int) -> None:
        """
        Raises:
            NotFound: no such member in `month`
        """
        self.months.require(month)
        async with self._lock(month):
            await self.store.delete(month, member_id)

        logger.info(f"Member deleted: id={member_id} from {month}")

    async def get_family_members(self, month: str, family: str) -> list[Member]:
        """Members of `family` in name order"""
        self.months.require(month)
        return await self.store.select(month, {"family": family}, order_by="full_name")

    async def get_existing_family_names(self, month: str) -> list[str]:
        """Distinct family names other than "Individual", sorted"""
        members = await self.list_members(month)
        names = {m.family for m in members if m.family != Defaults.FAMILY}
        return sorted(names, key=str.casefold)

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    async def assign_tokens(self, month: str) -> list[Member]:
        """Renumber tokens 1..N in name order

        Submitted as one batch: every token is cleared first, then assigned,
        so no stale duplicate survives roster changes. How atomic the batch
        is depends on the store (see ILedgerStore.update_many); if a batch is
        interrupted, run this again to repair.

        Returns:
            members in name order with their new tokens

        Raises:
            EmptyRosterError: `month` has no members
        """
        self.months.require(month)
        async with self._lock(month):
            members = await self.store.select(month, order_by="full_name")
            if not members:
                raise EmptyRosterError(
                    f"No members in {month} to assign tokens to", month=month
                )

            patches: list[tuple[int, Mapping[str, Any]]] = [
                (m.id, {"token_number": None}) for m in members
            ]
            patches += [
                (m.id, {"token_number": token})
                for token, m in enumerate(members, start=1)
            ]
            await self.store.update_many(month, patches)
            result = await self.store.select(month, order_by="full_name")

        logger.info(f"Tokens assigned in {month}: 1..{len(result)}")
        return result

    async def audit_tokens(self, month: str) -> TokenAudit:
        """Check tokens for missing values, duplicates and gaps"""
        members = await self.list_members(month)
        audit = TokenAudit(month=month, total_members=len(members))

        by_token: dict[int, list[int]] = {}
        for member in members:
            if member.token_number is None:
                audit.missing.append(member.id)
            else:
                by_token.setdefault(member.token_number, []).append(member.id)

        audit.duplicates = {t: ids for t, ids in sorted(by_token.items()) if len(ids) > 1}
        if by_token:
            audit.gaps = [t for t in range(1, max(by_token) + 1) if t not in by_token]

        if not audit.is_consistent:
            logger.warning(
                f"Token audit failed for {month}: missing={len(audit.missing)}, "
                f"duplicates={len(audit.duplicates)}, gaps={len(audit.gaps)}"
            )
        return audit

    # -------------------------------------------------------------------------
    # Winner
    # -------------------------------------------------------------------------

    async def get_current_winner(self, month: str) -> Member | None:
        """Member carrying this month's winner marker, if any"""
        self.months.require(month)
        winners = await self.store.select(month, {"draw_status": Winner(month)})
        return winners[0] if winners else None

    async def eligible_for_draw(self, month: str) -> list[Member]:
        """Paid, tokened, not yet drawn members in token order"""
        self.months.require(month)
        members = await self.store.select(month, order_by="token_number")
        return [m for m in members if m.is_eligible_for_draw()]

    async def declare_winner(self, month: str, member_id: int) -> Member:
        """Mark a member as winner of `month`

        Raises:
            DuplicateWinnerError: `month` already has a winner (nothing written)
            NotFound: no such member in `month`
            InvariantViolation: eligibility is enforced and the member is not
                eligible
        """
        self.months.require(month)
        async with self._lock(month):
            existing = await self.get_current_winner(month)
            if existing is not None:
                raise DuplicateWinnerError(
                    f"A winner has already been declared for {month}: "
                    f"{existing.full_name}",
                    month=month,
                    member_id=existing.id,
                )

            if self.enforce_winner_eligibility:
                member = await self.get_member(month, member_id)
                if not member.is_eligible_for_draw():
                    raise InvariantViolation(
                        f"{member.full_name} is not eligible for the {month} draw "
                        f"(must be paid, tokened and not drawn yet)",
                        month=month,
                        member_id=member_id,
                    )

            winner = await self._update(
                month, member_id, {"draw_status": Winner(month)}, declaring=True
            )

        logger.info(f"Winner declared for {month}: {winner.full_name} (id={winner.id})")
        return winner

    # -------------------------------------------------------------------------
    # Advance
    # -------------------------------------------------------------------------

    async def advance_to_next_month(self, current: str) -> str:
        """Seed the next month's ledger from `current`

        Everyone who has won (this month's winner, anyone already drawn and
        anyone who won an earlier month) is carried as drawn and exempt from
        payment; everyone else starts pending. Tokens and personal fields are
        carried unchanged. `current` itself is not modified.

        Returns:
            the next month identifier

        Raises:
            EndOfSequenceError: `current` is the last month
            EmptyRosterError: `current` has no members
            AlreadySeededError: the next month is already populated
            StoreError: a read or the bulk insert failed (nothing written)
        """
        self.months.require(current)
        next_month = self.months.next(current)
        if next_month is None:
            raise EndOfSequenceError(
                f"{current} is the last month of the scheme", month=current
            )

        async with self._lock(current), self._lock(next_month):
            members = await self.store.select(current, order_by="full_name")
            if not members:
                raise EmptyRosterError(
                    f"No members in {current} to carry forward", month=current
                )

            seeded = await self.store.select(next_month)
            if seeded:
                raise AlreadySeededError(
                    f"{next_month} already has {len(seeded)} members",
                    month=next_month,
                )

            winner = next((m for m in members if m.is_winner_of(current)), None)
            past_winners = await self._winner_identities(self.months.before(next_month))

            drafts = []
            for member in members:
                previously_won = member.has_won or member.identity in past_winners
                drafts.append({
                    "full_name": member.full_name,
                    "mobile_number": member.mobile_number,
                    "family": member.family,
                    "token_number": member.token_number,
                    "additional_information": member.additional_information,
                    "payment_status": (
                        PaymentStatus.NO_PAYMENT_REQUIRED
                        if previously_won else PaymentStatus.PENDING
                    ),
                    "paid_to": None,
                    "draw_status": DRAWN if previously_won else NOT_DRAWN,
                })

            await self.store.insert_many(next_month, drafts)

            try:
                await self._reconcile(next_month)
            except LedgerError as e:
                logger.warning(f"Reconciliation after advance to {next_month} failed: {e}")

        logger.info(
            f"Advanced {current} -> {next_month}: {len(drafts)} members, "
            f"winner={winner.full_name if winner else None}"
        )
        return next_month

    async def reconcile_month(self, month: str) -> list[int]:
        """Force payment exemption on every member who has already won

        Members who won any earlier month (matched by name and mobile) or
        already carry a drawn status are set to no_payment_required with
        paid_to cleared. This month's own winner is left alone.

        Returns:
            ids of corrected members

        Raises:
            StoreError: a read or write failed
        """
        self.months.require(month)
        async with self._lock(month):
            return await self._reconcile(month)

    async def _reconcile(self, month: str) -> list[int]:
        past_winners = await self._winner_identities(self.months.before(month))
        members = await self.store.select(month)

        patches: list[tuple[int, Mapping[str, Any]]] = []
        for member in members:
            if member.is_winner_of(month):
                continue
            if not (isinstance(member.draw_status, Drawn) or member.identity in past_winners):
                continue

            patch: dict[str, Any] = {}
            if member.payment_status != PaymentStatus.NO_PAYMENT_REQUIRED:
                patch["payment_status"] = PaymentStatus.NO_PAYMENT_REQUIRED
            if member.paid_to is not None:
                patch["paid_to"] = None
            if isinstance(member.draw_status, NotDrawn):
                patch["draw_status"] = DRAWN
            if patch:
                patches.append((member.id, patch))

        if patches:
            await self.store.update_many(month, patches)
            logger.info(f"Reconciled {len(patches)} member(s) in {month}")

        return [member_id for member_id, _ in patches]

    async def _winner_identities(self, months: Iterable[str]) -> set[tuple[str, str]]:
        """(full_name, mobile_number) of each month's winner; store errors propagate"""
        identities = set()
        for month in months:
            for winner in await self.store.select(month, {"draw_status": Winner(month)}):
                identities.add(winner.identity)
        return identities

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _update(
        self,
        month: str,
        member_id: int,
        patch: Mapping[str, Any],
        share_family_mobile: bool = False,
        declaring: bool = False,
    ) -> Member:
        """Validated update; caller holds the month lock

        Only declare_winner passes `declaring`; every other edit goes through
        the draw status gate.
        """
        try:
            values = normalize_patch(patch)
        except ValidationError as e:
            e.month, e.member_id = month, member_id
            raise

        current = await self.get_member(month, member_id)

        if "draw_status" in values and not declaring:
            self._check_draw_status_edit(month, current, values["draw_status"])

        touched = PAYMENT_FIELDS & values.keys()
        if touched and current.is_payment_locked:
            raise InvariantViolation(
                f"Payment details of {current.full_name} cannot be changed "
                f"(status: {current.payment_status.value})",
                month=month,
                member_id=member_id,
                field=sorted(touched)[0],
            )

        if values.get("payment_status") == PaymentStatus.NO_PAYMENT_REQUIRED:
            raise InvariantViolation(
                "no_payment_required is managed by the system",
                month=month,
                member_id=member_id,
                field="payment_status",
            )

        self._check_recipient(month, member_id, values.get("paid_to"))

        if values.get("token_number") is not None:
            await self._check_token_free(month, member_id, values["token_number"])

        if share_family_mobile and "family" in values:
            shared = await self._family_mobile(month, values["family"], exclude=member_id)
            if shared:
                values["mobile_number"] = shared

        member = await self._write(
            month, member_id, self.store.update(month, member_id, values)
        )
        logger.info(f"Member updated: id={member_id} in {month} ({', '.join(values)})")
        return member

    async def _write(self, month: str, member_id: int | None, operation: Any) -> Member:
        """Await a store write, translating constraint violations"""
        try:
            return await operation
        except ConstraintViolation as e:
            if e.field == "draw_status":
                raise DuplicateWinnerError(
                    f"A winner has already been declared for {month}",
                    month=month,
                    member_id=member_id,
                ) from e
            if e.field == "token_number":
                raise ValidationError(
                    f"Token number already assigned in {month}",
                    month=month,
                    member_id=member_id,
                    field="token_number",
                ) from e
            raise

    @staticmethod
    def _check_draw_status_edit(month: str, current: Member, status: DrawStatus) -> None:
        """Winner markers come from declare_winner only; a win is never undone"""
        if isinstance(status, Winner):
            raise InvariantViolation(
                f"Winners are set by the draw, not by editing {current.full_name}",
                month=month,
                member_id=current.id,
                field="draw_status",
            )
        if current.has_won and status != current.draw_status:
            raise InvariantViolation(
                f"Draw status of {current.full_name} cannot be changed "
                f"(status: {encode_draw_status(current.draw_status)})",
                month=month,
                member_id=current.id,
                field="draw_status",
            )

    async def _check_token_free(self, month: str, member_id: int | None, token: int) -> None:
        holders = await self.store.select(month, {"token_number": token})
        for holder in holders:
            if holder.id != member_id:
                raise ValidationError(
                    f"Token {token} is already assigned to {holder.full_name} in {month}",
                    month=month,
                    member_id=member_id,
                    field="token_number",
                )

    def _check_recipient(self, month: str, member_id: int | None, paid_to: str | None) -> None:
        if paid_to is None or self.paid_to_recipients is None:
            return
        if paid_to not in self.paid_to_recipients:
            allowed = ", ".join(sorted(self.paid_to_recipients))
            raise ValidationError(
                f"Unknown recipient '{paid_to}' (allowed: {allowed})",
                month=month,
                member_id=member_id,
                field="paid_to",
            )

    async def _family_mobile(
        self,
        month: str,
        family: str | None,
        exclude: int | None = None,
    ) -> str | None:
        """Mobile number of the first existing member of `family`"""
        if not family or family.strip() == Defaults.FAMILY:
            return None
        members = await self.store.select(month, {"family": family.strip()}, order_by="id")
        for member in members:
            if member.id != exclude:
                return member.mobile_number
        return None

