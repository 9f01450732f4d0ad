"""
Split Session

This module ties together the engine, the audit trail and the
collaborators, and owns the state of one split:
1. People and dishes
2. Tax and tip
3. History (start a new split, reload an old one)
4. Bulk add from free text

DESIGN DECISION: The session is the only writer of its collections.
- Every mutation goes through the engine functions
- Every mutation is audited
- Mutations are serialized with a lock and allocate() reads a consistent
  snapshot, so a concurrent caller never sees a half-applied change
"""

import math
import threading
from collections.abc import Iterable
from typing import Optional
from uuid import UUID

from dietsplit.audit import AuditLogger, configure_logging, create_session_id
from dietsplit.config import get_settings
from dietsplit.engine.allocation import AllocationCache, bill_subtotal
from dietsplit.engine.compatibility import incompatible_participants
from dietsplit.engine.mutations import (
    DishInput,
    InvalidEntryError,
    bulk_create_dishes,
    create_dish,
    create_person,
    find_dish,
    find_person,
    remove_dish,
    remove_person,
    set_dish_category,
    toggle_participation,
)
from dietsplit.engine.tax import TaxPercentControl
from dietsplit.models.audit import AuditEventBuilder
from dietsplit.models.split import (
    AllocationResult,
    DietType,
    Dish,
    DishType,
    Person,
    SavedSplit,
)
from dietsplit.services.extraction import (
    DishExtractor,
    ExtractionError,
    ExtractionUnavailableError,
)
from dietsplit.services.storage import HistoryStorageInterface


class SplitSession:
    """
    One meal being split.

    Usage:
        session = SplitSession()
        alice = session.add_person("Alice", DietType.OMNIVOROUS)
        session.add_dish("Pizza", 18, DishType.MEAT)
        result = session.allocate().rounded()
    """

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        history: Optional[HistoryStorageInterface] = None,
        extractor: Optional[DishExtractor] = None,
        session_id: Optional[UUID] = None,
    ):
        self._audit = audit_logger or AuditLogger()
        self._history = history
        self._extractor = extractor
        self.session_id = session_id or create_session_id()

        self._lock = threading.RLock()
        self._people: list[Person] = []
        self._dishes: list[Dish] = []
        self._tax = 0.0
        self._tip = 0.0

        app_settings = get_settings().app
        configure_logging(app_settings.debug_mode)
        self._tax_control = TaxPercentControl(
            epsilon=app_settings.tax_percent_epsilon,
            places=app_settings.currency_places,
        )
        self._cache = AllocationCache()

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def people(self) -> tuple[Person, ...]:
        with self._lock:
            return tuple(self._people)

    @property
    def dishes(self) -> tuple[Dish, ...]:
        with self._lock:
            return tuple(self._dishes)

    @property
    def tax(self) -> float:
        return self._tax

    @property
    def tip(self) -> float:
        return self._tip

    @property
    def tax_percentage(self) -> Optional[float]:
        """The active tax percentage, or None when tax was entered as an amount."""
        if self._tax_control.percent_mode:
            return self._tax_control.percentage
        return None

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def get_person(self, person_id: UUID) -> Optional[Person]:
        with self._lock:
            return find_person(self._people, person_id)

    def get_dish(self, dish_id: UUID) -> Optional[Dish]:
        with self._lock:
            return find_dish(self._dishes, dish_id)

    # =========================================================================
    # PEOPLE
    # =========================================================================

    def add_person(self, name: str, diet: DietType = DietType.OMNIVOROUS) -> Person:
        """
        Add someone to the split.

        Raises:
            InvalidEntryError: If the name is empty
        """
        try:
            person = create_person(name, diet)
        except InvalidEntryError as e:
            self._audit.log(AuditEventBuilder.entry_rejected("person", e.issues, self.session_id))
            raise

        with self._lock:
            self._people.append(person)

        self._audit.log(AuditEventBuilder.person_added(
            person_id=person.id,
            name=person.name,
            diet=person.diet.value,
            session_id=self.session_id,
        ))
        return person

    def remove_person(self, person_id: UUID) -> Optional[Person]:
        """Remove someone and take them off every dish. Unknown ids are ignored."""
        with self._lock:
            affected = sum(1 for d in self._dishes if person_id in d.participant_ids)
            person = remove_person(self._people, self._dishes, person_id)

        if person is None:
            self._log_unknown("remove_person", person_id)
            return None

        self._audit.log(AuditEventBuilder.person_removed(
            person_id=person.id,
            name=person.name,
            affected_dishes=affected,
            session_id=self.session_id,
        ))
        return person

    # =========================================================================
    # DISHES
    # =========================================================================

    def add_dish(
        self,
        name: str,
        price: float,
        category: Optional[DishType] = None,
        participants: Optional[Iterable[UUID]] = None,
    ) -> Dish:
        """
        Add a dish.

        Without `participants` this is a smart add: everyone whose diet
        accepts `category` shares it. With `participants` the given people
        share it regardless of diet; ids of people not in the session are
        dropped.

        Raises:
            InvalidEntryError: If name, price or category is invalid
        """
        with self._lock:
            if participants is not None:
                known = {p.id for p in self._people}
                participants = {pid for pid in participants if pid in known}
            try:
                dish = create_dish(
                    name,
                    price,
                    category,
                    people=self._people,
                    participants=participants,
                )
            except InvalidEntryError as e:
                self._audit.log(AuditEventBuilder.entry_rejected("dish", e.issues, self.session_id))
                raise
            self._dishes.append(dish)
            self._sync_tax_percentage()

        self._audit.log(AuditEventBuilder.dish_added(
            dish_id=dish.id,
            name=dish.name,
            price=dish.price,
            category=dish.category.value,
            participant_count=dish.split_count,
            smart=participants is None,
            session_id=self.session_id,
        ))
        return dish

    def bulk_add_dishes(self, items: Iterable[DishInput]) -> list[Dish]:
        """
        Smart-add several dishes at once.

        All items are validated first; on InvalidEntryError nothing is added.
        """
        with self._lock:
            try:
                dishes = bulk_create_dishes(self._people, items)
            except InvalidEntryError as e:
                self._audit.log(AuditEventBuilder.entry_rejected("dish", e.issues, self.session_id))
                raise
            self._dishes.extend(dishes)
            if dishes:
                self._sync_tax_percentage()

        if dishes:
            self._audit.log(AuditEventBuilder.dishes_bulk_added(len(dishes), self.session_id))
        return dishes

    async def add_dishes_from_text(
        self,
        text: str,
        extractor: Optional[DishExtractor] = None,
    ) -> list[Dish]:
        """
        Ask the extractor for dishes and bulk-add them.

        Any extraction failure, including items that fail validation,
        is logged and adds nothing.
        """
        extractor = extractor or self._extractor
        if extractor is None:
            self._audit.log(AuditEventBuilder.extraction_failed(
                "No dish extractor configured", self.session_id,
            ))
            return []

        try:
            proposed = await extractor.extract_dishes(text)
        except ExtractionError as e:
            if isinstance(e, ExtractionUnavailableError):
                self._audit.log(AuditEventBuilder.external_service_error(
                    "dish_extraction", str(e), self.session_id,
                ))
            self._audit.log(AuditEventBuilder.extraction_failed(str(e), self.session_id))
            return []

        self._audit.log(AuditEventBuilder.extraction_completed(len(proposed), self.session_id))
        try:
            return self.bulk_add_dishes(proposed)
        except InvalidEntryError as e:
            # Bad extractor output counts as a failed extraction
            self._audit.log(AuditEventBuilder.extraction_failed(str(e), self.session_id))
            return []

    def remove_dish(self, dish_id: UUID) -> Optional[Dish]:
        """Delete a dish. Unknown ids are ignored."""
        with self._lock:
            dish = remove_dish(self._dishes, dish_id)
            if dish is not None:
                self._sync_tax_percentage()

        if dish is None:
            self._log_unknown("remove_dish", dish_id)
            return None

        self._audit.log(AuditEventBuilder.dish_removed(dish.id, dish.name, self.session_id))
        return dish

    def set_dish_category(self, dish_id: UUID, category: DishType) -> Optional[Dish]:
        """
        Change a dish's category.

        Participants are re-derived from diets; manual edits to this
        dish are discarded.
        """
        with self._lock:
            dish = find_dish(self._dishes, dish_id)
            if dish is not None:
                old_category = dish.category
                old_participants = set(dish.participant_ids)
                set_dish_category(self._dishes, self._people, dish_id, category)

        if dish is None:
            self._log_unknown("set_dish_category", dish_id)
            return None

        self._audit.log(AuditEventBuilder.dish_category_changed(
            dish_id=dish.id,
            old_category=old_category.value,
            new_category=dish.category.value,
            changed=len(old_participants ^ dish.participant_ids),
            participant_count=dish.split_count,
            session_id=self.session_id,
        ))
        return dish

    def toggle_participation(self, dish_id: UUID, person_id: UUID) -> Optional[bool]:
        """
        Add a person to a dish, or take them off it.

        Returns True if they joined, False if they left, None for unknown ids.
        """
        with self._lock:
            joined = toggle_participation(self._dishes, self._people, dish_id, person_id)

        if joined is None:
            self._log_unknown("toggle_participation", dish_id)
            return None

        self._audit.log(AuditEventBuilder.participation_toggled(
            dish_id=dish_id,
            person_id=person_id,
            joined=joined,
            session_id=self.session_id,
        ))
        return joined

    def incompatible_participants(self, dish_id: UUID) -> set[UUID]:
        """Participants of a dish who can't eat it. Advisory only."""
        with self._lock:
            dish = find_dish(self._dishes, dish_id)
            if dish is None:
                return set()
            return incompatible_participants(dish, self._people)

    def dishes_for(self, person_id: UUID) -> list[Dish]:
        """Dishes the person shares."""
        with self._lock:
            return [d for d in self._dishes if person_id in d.participant_ids]

    def available_dishes_for(self, person_id: UUID) -> list[Dish]:
        """Dishes the person could still be added to."""
        with self._lock:
            return [d for d in self._dishes if person_id not in d.participant_ids]

    # =========================================================================
    # TAX AND TIP
    # =========================================================================

    def set_tax(self, amount: float) -> None:
        """Set tax as an amount. Leaves percent mode."""
        amount = self._validate_amount("tax", amount)
        with self._lock:
            self._tax_control.set_amount(amount)
            self._apply_amount("tax", amount)

    def set_tax_percentage(self, percentage: float) -> float:
        """
        Set tax as a percentage of the bill subtotal.

        The amount follows the subtotal until set_tax() is called.
        Returns the resulting amount.
        """
        percentage = self._validate_amount("tax_percentage", percentage)
        with self._lock:
            amount = self._tax_control.set_percentage(percentage, bill_subtotal(self._dishes))
            self._apply_amount("tax", amount)
        return amount

    def set_tip(self, amount: float) -> None:
        amount = self._validate_amount("tip", amount)
        with self._lock:
            self._apply_amount("tip", amount)

    def _validate_amount(self, field: str, amount: float) -> float:
        try:
            value = float(amount)
        except (TypeError, ValueError):
            value = -1.0
        if not math.isfinite(value) or value < 0:
            issues = [{"field": field, "message": "Must be a non-negative number"}]
            self._audit.log(AuditEventBuilder.entry_rejected("bill", issues, self.session_id))
            raise InvalidEntryError("bill", issues)
        return value

    def _apply_amount(self, field: str, amount: float) -> None:
        old = self._tax if field == "tax" else self._tip
        if field == "tax":
            self._tax = amount
        else:
            self._tip = amount
        if old != amount:
            self._audit.log(AuditEventBuilder.amount_updated(field, old, amount, self.session_id))

    def _sync_tax_percentage(self) -> None:
        # Caller holds the lock
        amount = self._tax_control.on_subtotal_changed(bill_subtotal(self._dishes))
        if amount is not None:
            self._apply_amount("tax", amount)

    # =========================================================================
    # ALLOCATION
    # =========================================================================

    def allocate(self) -> AllocationResult:
        """
        Compute what everyone owes from a consistent snapshot.

        Memoized: unchanged inputs return the same result object, which
        callers must not mutate.
        """
        with self._lock:
            return self._cache.allocate(self._people, self._dishes, self._tax, self._tip)

    # =========================================================================
    # HISTORY
    # =========================================================================

    def snapshot(self) -> SavedSplit:
        """Immutable record of the current split and its totals."""
        with self._lock:
            result = self.allocate()
            return SavedSplit(
                subtotal=result.subtotal,
                tax=self._tax,
                tip=self._tip,
                total=result.grand_total,
                friend_count=len(self._people),
                dish_count=len(self._dishes),
                people=[p.model_copy(deep=True) for p in self._people],
                dishes=[d.model_copy(deep=True) for d in self._dishes],
                totals={entry.person_id: entry.final_total for entry in result.people},
            )

    async def start_new_split(self) -> Optional[SavedSplit]:
        """
        Save the current split to history (if it has people AND dishes),
        then clear the session.

        Returns the saved snapshot, or None if nothing was worth saving.
        """
        saved = None
        # Snapshot and clear under one lock; the save runs after
        with self._lock:
            if self._people and self._dishes:
                saved = self.snapshot()
            self._clear()
        self._audit.log(AuditEventBuilder.split_reset(self.session_id))

        if saved is not None and self._history is not None:
            await self._history.save_split(saved)
            self._audit.log(AuditEventBuilder.split_saved(saved.id, saved.total, self.session_id))

        return saved

    async def history(self, limit: int = 50) -> list[SavedSplit]:
        """Saved splits, newest first. Empty when no storage is configured."""
        if self._history is None:
            return []
        return await self._history.list_splits(limit=limit)

    def load_split(self, split: SavedSplit) -> None:
        """Replace the session's state with a saved split."""
        with self._lock:
            self._people = [p.model_copy(deep=True) for p in split.people]
            self._dishes = [d.model_copy(deep=True) for d in split.dishes]
            self._tax = split.tax or 0.0
            self._tip = split.tip or 0.0
            self._tax_control.set_amount(self._tax)
            self._cache.clear()

        self._audit.log(AuditEventBuilder.split_loaded(split.id, self.session_id))

    def reset(self) -> None:
        """Clear people, dishes, tax and tip."""
        with self._lock:
            self._clear()
        self._audit.log(AuditEventBuilder.split_reset(self.session_id))

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _clear(self) -> None:
        # Caller holds the lock
        self._people = []
        self._dishes = []
        self._tax = 0.0
        self._tip = 0.0
        self._tax_control.set_amount(0.0)
        self._cache.clear()

    def _log_unknown(self, operation: str, identifier: UUID) -> None:
        self._audit.log(AuditEventBuilder.unknown_identifier(operation, identifier, self.session_id))
