"""
Progress reconciliation.

Every mutation of a goal's progress goes through GoalReconciler. A goal and its
linked parent/children each hold their own copy of the progress ledger
(count_history, progress and, for good enough goals, quarterly_values); the
reconciler rewrites whole goals so those copies never drift.

Operations are sequential read-modify-write units over the collection they are
given. There is no locking: two operations running at once are only ordered by the
store's own per-key writes.
"""
import logging
import uuid
from typing import Dict, List, Optional, Sequence

from models import Goal, GoalStatus, TrackingType
from storage.storage_interface import GoalStore
from tracking import completion, history, linkage
from tracking.dates import parse_iso_date, parse_quarter_key, quarter_key, validate_amount
from tracking.errors import GoalNotFoundError, InvalidInputError
from tracking.rate_limit import RecalculationCooldown

logger = logging.getLogger("reconciler")


def new_goal_id() -> str:
    return uuid.uuid4().hex[:13]


def _ledger(goal: Goal) -> tuple:
    """Comparable view of the fields linked goals must share"""
    tracking = goal.tracking
    quarterly = tuple(sorted((tracking.quarterly_values or {}).items())) if goal.is_good_enough else None
    return (
        tuple((e.date, e.value) for e in tracking.count_history or []),
        tracking.progress,
        quarterly,
    )


def _ledger_fields(source: Goal) -> Dict:
    """Tracking fields copied from source onto its linked goals"""
    tracking = source.tracking
    fields = {
        "count_history": list(tracking.count_history) if tracking.count_history is not None else None,
        "progress": tracking.progress,
    }
    if source.is_good_enough:
        fields["quarterly_values"] = dict(tracking.quarterly_values) if tracking.quarterly_values is not None else None
    return fields


class GoalReconciler:
    """The single path for mutating goal progress"""

    def __init__(self, store: GoalStore, cooldown: Optional[RecalculationCooldown] = None):
        self.store = store
        self.cooldown = cooldown

    def _find(self, all_goals: Sequence[Goal], goal_id: str) -> Goal:
        for goal in all_goals:
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def _persist(self, goals: List[Goal]) -> List[Goal]:
        # Store failures propagate untouched
        return self.store.upsert_goals(goals)

    def _share_ledger(self, all_goals: Sequence[Goal], goal: Goal, **fields) -> List[Goal]:
        """Write the same tracking fields onto the goal, its parent and its children"""
        related = linkage.related_goals(all_goals, goal)
        updated = []
        for peer in related:
            copied = {
                name: list(value) if isinstance(value, list) else dict(value) if isinstance(value, dict) else value
                for name, value in fields.items()
            }
            updated.append(peer.with_tracking(**copied))
        return updated

    # Goal lifecycle

    def add_goal(self, all_goals: Sequence[Goal], goal: Goal) -> Goal:
        """Store a new goal with empty progress"""
        if any(existing.id == goal.id for existing in all_goals):
            raise InvalidInputError(f"Goal with ID '{goal.id}' already exists")
        if goal.parent_goal_id is not None:
            self._find(all_goals, goal.parent_goal_id)

        tracking = {"completed_dates": []}
        if goal.tracking_type == TrackingType.COUNT or goal.is_good_enough:
            tracking.update(count_history=[], progress=0)
        created = goal.with_tracking(**tracking).model_copy(update={"status": GoalStatus.NOT_STARTED})

        self._persist([created])
        logger.info(f"Created goal '{created.id}' ({created.time_horizon.value})")
        return created

    def delete_goal(self, all_goals: Sequence[Goal], goal_id: str) -> bool:
        """Delete a goal; children keep their now dangling parent reference"""
        self._find(all_goals, goal_id)
        deleted = self.store.delete_goal(goal_id)
        logger.info(f"Deleted goal '{goal_id}'")
        return deleted

    # Progress mutations

    def record_progress(self, all_goals: Sequence[Goal], goal_id: str, amount, date: str) -> List[Goal]:
        """
        Record amount for date on a goal and every goal linked to it.

        Returns the goal followed by its parent and children, all carrying the same
        count_history, progress and completed_dates.
        """
        amount = validate_amount(amount)
        parse_iso_date(date)
        goal = self._find(all_goals, goal_id)

        count_history = history.upsert_entry(goal.tracking.count_history, date, amount)
        completed_dates = completion.with_completion(
            goal.tracking.completed_dates, date, completion.is_complete_value(goal, amount)
        )

        updated = self._share_ledger(
            all_goals,
            goal,
            count_history=count_history,
            progress=history.total(count_history),
            completed_dates=completed_dates,
        )
        self._persist(updated)
        logger.info(f"Recorded {amount} on {date} for goal '{goal_id}' ({len(updated)} goal(s) updated)")
        return updated

    def delete_progress_entry(self, all_goals: Sequence[Goal], goal_id: str, date: str) -> List[Goal]:
        """Drop the entry for date and un-complete the day on the goal and its linked goals"""
        parse_iso_date(date)
        goal = self._find(all_goals, goal_id)

        count_history = history.remove_entry(goal.tracking.count_history, date)
        updated = self._share_ledger(
            all_goals,
            goal,
            count_history=count_history,
            progress=history.total(count_history),
            completed_dates=completion.with_completion(goal.tracking.completed_dates, date, False),
        )
        self._persist(updated)
        logger.info(f"Removed {date} from goal '{goal_id}'")
        return updated

    def toggle_boolean_completion(self, all_goals: Sequence[Goal], goal_id: str, date: str) -> Goal:
        """Flip date in completed_dates; linked goals are not touched"""
        parse_iso_date(date)
        goal = self._find(all_goals, goal_id)

        done = date in goal.tracking.completed_dates
        updated = goal.with_tracking(
            completed_dates=completion.with_completion(goal.tracking.completed_dates, date, not done)
        )
        self._persist([updated])
        logger.info(f"Marked {date} {'not done' if done else 'done'} for goal '{goal_id}'")
        return updated

    def set_quarterly_value(self, all_goals: Sequence[Goal], goal_id: str, quarter: str, value) -> List[Goal]:
        """Store a good enough goal's value for one quarter ('Qn YYYY')"""
        value = validate_amount(value)
        parsed = parse_quarter_key(quarter)
        if parsed is None:
            raise InvalidInputError(f"Invalid quarter '{quarter}': expected 'Qn YYYY'")
        goal = self._find(all_goals, goal_id)
        if not goal.is_good_enough:
            raise InvalidInputError(f"Goal '{goal_id}' is not a good enough goal")

        quarterly_values = dict(goal.tracking.quarterly_values or {})
        quarterly_values[quarter_key(*parsed)] = value

        updated = self._share_ledger(
            all_goals,
            goal,
            quarterly_values=quarterly_values,
            count_history=history.history_from_quarterly(quarterly_values),
            progress=sum(quarterly_values.values()),
        )
        self._persist(updated)
        logger.info(f"Set {quarter_key(*parsed)} = {value} for goal '{goal_id}'")
        return updated

    # Edits and sweeps

    def _normalized(self, goal: Goal) -> Goal:
        """Re-derive cached tracking fields from the goal's own history"""
        tracking = goal.tracking
        changes = {"completed_dates": sorted(set(tracking.completed_dates))}

        if goal.is_good_enough and tracking.quarterly_values:
            changes["count_history"] = history.history_from_quarterly(tracking.quarterly_values)
            changes["progress"] = sum(tracking.quarterly_values.values())
        elif tracking.count_history is not None:
            count_history = history.normalize(tracking.count_history)
            changes["count_history"] = count_history
            if goal.tracking_type == TrackingType.COUNT or tracking.progress is not None:
                changes["progress"] = history.total(count_history)

        return goal.with_tracking(**changes)

    def update_goal(self, all_goals: Sequence[Goal], updated_goal: Goal) -> List[Goal]:
        """
        Persist an edited goal.

        When the goal is linked, the longest history among it and its linked goals is
        taken as authoritative and written onto all of them, so an edit made from a
        stale copy cannot shrink the shared ledger.
        """
        self._find(all_goals, updated_goal.id)
        goal = self._normalized(updated_goal)
        goals = [goal if existing.id == goal.id else existing for existing in all_goals]

        related = linkage.related_goals(goals, goal)
        if len(related) == 1:
            self._persist([goal])
            logger.info(f"Updated goal '{goal.id}'")
            return [goal]

        # Cached totals of the authority are re-derived, never trusted
        authority = self._normalized(max(related, key=lambda g: len(g.tracking.count_history or [])))
        kept_dates = {e.date for e in authority.tracking.count_history or []}
        for peer in related:
            dropped = sorted({e.date for e in peer.tracking.count_history or []} - kept_dates)
            if dropped:
                logger.warning(f"Goal '{peer.id}' history entries {dropped} replaced by the longer history of '{authority.id}'")

        fields = _ledger_fields(authority)
        updated = [goal.with_tracking(**fields)]
        for peer in related[1:]:
            synced = peer.with_tracking(**fields)
            if _ledger(synced) != _ledger(peer):
                updated.append(synced)

        self._persist(updated)
        logger.info(f"Updated goal '{goal.id}' and synced {len(updated) - 1} linked goal(s)")
        return updated

    def _recalculated(self, goal: Goal) -> Goal:
        tracking = goal.tracking
        if goal.is_good_enough and tracking.quarterly_values:
            count_history = history.history_from_quarterly(tracking.quarterly_values)
            progress = sum(tracking.quarterly_values.values())
            if history.same_history(count_history, tracking.count_history) and progress == tracking.progress:
                return goal
            return goal.with_tracking(count_history=count_history, progress=progress)

        if goal.tracking_type == TrackingType.COUNT and tracking.count_history:
            count_history = history.normalize(tracking.count_history)
            progress = history.total(count_history)
            if history.same_history(count_history, tracking.count_history) and progress == tracking.progress:
                return goal
            return goal.with_tracking(count_history=count_history, progress=progress)

        return goal

    def _sync_linked_pairs(self, goals: List[Goal]) -> List[Goal]:
        """Copy each child's ledger onto its parent until nothing changes"""
        pairs = [(child.id, parent.id) for child, parent in linkage.all_linked_pairs(goals)]
        current = {goal.id: goal for goal in goals}

        for _ in range(len(pairs) + 1):
            before = {goal_id: _ledger(goal) for goal_id, goal in current.items()}
            for child_id, parent_id in pairs:
                child, parent = current[child_id], current[parent_id]
                if _ledger(child) != _ledger(parent):
                    current[parent_id] = parent.with_tracking(**_ledger_fields(child))
            if all(_ledger(goal) == before[goal_id] for goal_id, goal in current.items()):
                break
        else:
            logger.warning("Linked goal sync did not settle; siblings disagree on their shared parent")

        return [current[goal.id] for goal in goals]

    def recalculate_all(self, all_goals: Sequence[Goal], force: bool = False) -> List[Goal]:
        """
        Restore every cached total and linked-pair copy across the collection.

        Only goals whose stored state changes are written, so a second call with no
        intervening edits writes nothing. Calls inside the cooldown window are
        skipped unless force is set.
        """
        acquired = self.cooldown.try_acquire() if self.cooldown is not None else True
        if not acquired and not force:
            logger.debug("Recalculation skipped, still inside cooldown window")
            return list(all_goals)

        goals = [self._recalculated(goal) for goal in all_goals]
        goals = self._sync_linked_pairs(goals)

        changed = [
            goal for goal, original in zip(goals, all_goals)
            if goal.to_record() != original.to_record()
        ]
        if changed:
            try:
                self._persist(changed)
            except Exception:
                # A failed sweep does not count as a run
                if acquired and self.cooldown is not None:
                    self.cooldown.reset()
                raise
        logger.info(f"Recalculation updated {len(changed)} of {len(goals)} goal(s)")
        return goals
