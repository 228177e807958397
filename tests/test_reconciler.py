"""
Progress Reconciler Tests - recording progress and keeping linked goals in sync.

Run with: pytest tests/test_reconciler.py -v
"""
import pytest

from models import CountEntry, GoalStatus, GoalType, TimeHorizon, TrackingType
from tracking import history
from tracking.errors import GoalNotFoundError, InvalidInputError, StoreFailureError
from tracking.rate_limit import RecalculationCooldown
from tracking.reconciler import GoalReconciler


def pairs(goal):
    return [(e.date, e.value) for e in goal.tracking.count_history or []]


def by_id(goals):
    return {g.id: g for g in goals}


@pytest.fixture
def reconciler(store):
    return GoalReconciler(store)


# =============================================================================
# record_progress
# =============================================================================

class TestRecordProgress:

    def test_records_and_sums(self, reconciler, goal_factory):
        goal = goal_factory("g", history=[("2024-01-01", 2)])
        [updated] = reconciler.record_progress([goal], "g", 3, "2024-01-02")
        assert pairs(updated) == [("2024-01-01", 2), ("2024-01-02", 3)]
        assert updated.tracking.progress == 5

    def test_zero_removes_entry(self, reconciler, goal_factory):
        goal = goal_factory("g", history=[("2024-05-01", 4), ("2024-05-02", 1)], completed_dates=["2024-05-01"])
        [updated] = reconciler.record_progress([goal], "g", 0, "2024-05-01")
        assert "2024-05-01" not in [e.date for e in updated.tracking.count_history]
        assert "2024-05-01" not in updated.tracking.completed_dates
        assert updated.tracking.progress == 1

    def test_zero_on_missing_date_stores_nothing(self, reconciler, goal_factory):
        [updated] = reconciler.record_progress([goal_factory("g")], "g", 0, "2024-05-01")
        assert updated.tracking.count_history == []
        assert updated.tracking.progress == 0

    def test_single_entry_per_date_latest_wins(self, reconciler, store, goal_factory):
        store.goals["g"] = goal_factory("g")
        reconciler.record_progress(store.get_all_goals(), "g", 3, "2024-02-02")
        [updated] = reconciler.record_progress(store.get_all_goals(), "g", 8, "2024-02-02")
        assert pairs(updated) == [("2024-02-02", 8)]
        assert updated.tracking.progress == 8

    def test_completion_boundary_with_target(self, reconciler, goal_factory):
        goal = goal_factory("g", target=10)
        [hit] = reconciler.record_progress([goal], "g", 10, "2024-03-01")
        assert "2024-03-01" in hit.tracking.completed_dates
        [miss] = reconciler.record_progress([hit], "g", 9, "2024-03-01")
        assert "2024-03-01" not in miss.tracking.completed_dates

    def test_propagates_to_parent_and_children(self, reconciler, store, goal_factory):
        goals = [
            goal_factory("P", target=100),
            goal_factory("C", target=100, parent="P"),
            goal_factory("G", target=100, parent="C"),
            goal_factory("X"),
        ]
        updated = by_id(reconciler.record_progress(goals, "C", 5, "2024-01-10"))
        assert set(updated) == {"C", "P", "G"}
        for goal in updated.values():
            assert pairs(goal) == [("2024-01-10", 5)]
            assert goal.tracking.progress == 5
        assert [g.id for g in store.batches[0]] == ["C", "P", "G"]

    def test_preserves_other_fields_of_linked_goals(self, reconciler, goal_factory):
        parent = goal_factory("P", target=500, category="health", status=GoalStatus.IN_PROGRESS)
        child = goal_factory("C", target=50, parent="P")
        updated = by_id(reconciler.record_progress([parent, child], "C", 5, "2024-01-10"))
        assert updated["P"].category == "health"
        assert updated["P"].status == GoalStatus.IN_PROGRESS
        assert updated["P"].tracking.target.value == 500

    def test_unknown_goal(self, reconciler, store, goal_factory):
        with pytest.raises(GoalNotFoundError):
            reconciler.record_progress([goal_factory("g")], "nope", 1, "2024-01-01")
        assert store.batches == []

    @pytest.mark.parametrize("amount", ["5", None, float("nan"), float("inf"), True])
    def test_rejects_bad_amounts(self, reconciler, store, goal_factory, amount):
        with pytest.raises(InvalidInputError):
            reconciler.record_progress([goal_factory("g")], "g", amount, "2024-01-01")
        assert store.batches == []

    @pytest.mark.parametrize("date", ["2024-13-01", "2024-02-30", "01/02/2024", "20240101", ""])
    def test_rejects_bad_dates(self, reconciler, goal_factory, date):
        with pytest.raises(InvalidInputError):
            reconciler.record_progress([goal_factory("g")], "g", 1, date)

    def test_store_failure_propagates(self, failing_store_factory, goal_factory):
        reconciler = GoalReconciler(failing_store_factory())
        with pytest.raises(StoreFailureError):
            reconciler.record_progress([goal_factory("g")], "g", 1, "2024-01-01")


class TestDeleteProgressEntry:

    def test_removes_entry_and_completion_on_linked_goals(self, reconciler, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 3), ("2024-01-02", 4)], completed_dates=["2024-01-01", "2024-01-02"])
        child = goal_factory("C", history=[("2024-01-01", 3), ("2024-01-02", 4)], parent="P", completed_dates=["2024-01-01", "2024-01-02"])
        updated = by_id(reconciler.delete_progress_entry([parent, child], "C", "2024-01-01"))
        for goal in updated.values():
            assert pairs(goal) == [("2024-01-02", 4)]
            assert goal.tracking.progress == 4
            assert goal.tracking.completed_dates == ["2024-01-02"]


# =============================================================================
# toggle_boolean_completion
# =============================================================================

class TestToggleBooleanCompletion:

    def test_toggles_on_and_off(self, reconciler, goal_factory):
        goal = goal_factory("g", tracking_type=TrackingType.BOOLEAN, completed_dates=["2024-01-05"])
        on = reconciler.toggle_boolean_completion([goal], "g", "2024-01-01")
        assert on.tracking.completed_dates == ["2024-01-01", "2024-01-05"]
        off = reconciler.toggle_boolean_completion([on], "g", "2024-01-05")
        assert off.tracking.completed_dates == ["2024-01-01"]

    def test_does_not_propagate_or_touch_history(self, reconciler, store, goal_factory):
        parent = goal_factory("P", tracking_type=TrackingType.BOOLEAN)
        child = goal_factory("C", tracking_type=TrackingType.BOOLEAN, parent="P")
        updated = reconciler.toggle_boolean_completion([parent, child], "C", "2024-01-01")
        assert updated.id == "C"
        assert updated.tracking.count_history is None
        assert updated.tracking.progress is None
        assert [g.id for g in store.written] == ["C"]

    def test_unknown_goal(self, reconciler):
        with pytest.raises(GoalNotFoundError):
            reconciler.toggle_boolean_completion([], "nope", "2024-01-01")


# =============================================================================
# recalculate_all
# =============================================================================

class TestRecalculateAll:

    def test_fixes_stale_progress(self, reconciler, store, goal_factory):
        goal = goal_factory("g", history=[("2024-01-01", 2), ("2024-01-02", 3)])
        stale = goal.with_tracking(progress=99)
        [result] = reconciler.recalculate_all([stale])
        assert result.tracking.progress == 5
        assert [g.id for g in store.written] == ["g"]

    def test_good_enough_regenerates_history(self, reconciler, goal_factory):
        goal = goal_factory(
            "ge", type=GoalType.GOOD_ENOUGH, horizon=TimeHorizon.ONGOING,
            quarterly_values={"Q2 2023": 80, "Q1 2023": 75}
        )
        [result] = reconciler.recalculate_all([goal])
        assert pairs(result) == [("Q1-2023", 75), ("Q2-2023", 80)]
        assert result.tracking.progress == 155

    def test_child_overwrites_parent(self, reconciler, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 1)])
        child = goal_factory("C", history=[("2024-01-01", 1), ("2024-01-02", 2)], parent="P")
        result = by_id(reconciler.recalculate_all([parent, child]))
        assert pairs(result["P"]) == pairs(result["C"]) == [("2024-01-01", 1), ("2024-01-02", 2)]
        assert result["P"].tracking.progress == 3

    def test_parent_never_overwrites_child(self, reconciler, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 1), ("2024-01-02", 2)])
        child = goal_factory("C", history=[("2024-01-01", 1)], parent="P")
        result = by_id(reconciler.recalculate_all([parent, child]))
        assert pairs(result["C"]) == [("2024-01-01", 1)]
        assert pairs(result["P"]) == [("2024-01-01", 1)]

    def test_chain_converges_in_one_call(self, reconciler, store, goal_factory):
        goals = [
            goal_factory("top"),
            goal_factory("mid", parent="top"),
            goal_factory("leaf", history=[("2024-01-01", 4)], parent="mid"),
        ]
        result = reconciler.recalculate_all(goals)
        assert all(pairs(g) == [("2024-01-01", 4)] for g in result)
        writes = len(store.written)
        reconciler.recalculate_all(result)
        assert len(store.written) == writes

    def test_idempotent_fixpoint(self, reconciler, store, goal_factory):
        goals = [
            goal_factory("P", history=[("2024-01-01", 1)]).with_tracking(progress=50),
            goal_factory("C1", history=[("2024-02-01", 2)], parent="P"),
            goal_factory("C2", history=[("2024-03-01", 3)], parent="P"),
            goal_factory("A", parent="B"),
            goal_factory("B", history=[("2024-04-01", 4)], parent="A"),
            goal_factory(
                "ge", type=GoalType.GOOD_ENOUGH, horizon=TimeHorizon.ONGOING,
                quarterly_values={"Q1 2024": 1}
            ),
        ]
        first = reconciler.recalculate_all(goals)
        writes = len(store.batches)
        second = reconciler.recalculate_all(first)
        assert [g.to_record() for g in second] == [g.to_record() for g in first]
        assert len(store.batches) == writes

    def test_sum_invariant_after_recalculation(self, reconciler, goal_factory):
        goals = [
            goal_factory("a", history=[("2024-01-02", 2), ("2024-01-01", 1), ("2024-01-02", 5)]),
            goal_factory("b", history=[("2024-01-01", 3)], parent="a"),
        ]
        for goal in reconciler.recalculate_all(goals):
            assert goal.tracking.progress == history.total(goal.tracking.count_history)

    def test_cooldown_skips_reentry(self, store, goal_factory):
        now = [100.0]
        reconciler = GoalReconciler(store, cooldown=RecalculationCooldown(5, clock=lambda: now[0]))
        stale = goal_factory("g", history=[("2024-01-01", 2)]).with_tracking(progress=0)

        reconciler.recalculate_all([goal_factory("x")])
        skipped = reconciler.recalculate_all([stale])
        assert skipped[0].tracking.progress == 0
        assert store.batches == []

        forced = reconciler.recalculate_all([stale], force=True)
        assert forced[0].tracking.progress == 2

        now[0] = 106.0
        assert reconciler.recalculate_all([stale])[0].tracking.progress == 2

    def test_failed_sweep_does_not_start_cooldown(self, store, failing_store_factory, goal_factory):
        cooldown = RecalculationCooldown(5, clock=lambda: 100.0)
        stale = goal_factory("g", history=[("2024-01-01", 2)]).with_tracking(progress=0)

        with pytest.raises(StoreFailureError):
            GoalReconciler(failing_store_factory(), cooldown=cooldown).recalculate_all([stale])

        [retried] = GoalReconciler(store, cooldown=cooldown).recalculate_all([stale])
        assert retried.tracking.progress == 2
        assert [g.id for g in store.written] == ["g"]


class TestLinkedScenario:

    def test_record_then_recalculate(self, reconciler, store, linked_miles):
        store.upsert_goals(linked_miles)
        reconciler.record_progress(store.get_all_goals(), "B", 5, "2024-01-10")
        reconciler.recalculate_all(store.get_all_goals())
        for goal_id in ("A", "B"):
            goal = store.get_goal(goal_id)
            assert goal.tracking.count_history == [CountEntry(date="2024-01-10", value=5)]
            assert goal.tracking.progress == 5


# =============================================================================
# update_goal
# =============================================================================

class TestUpdateGoal:

    def test_unlinked_goal_is_normalized(self, reconciler, goal_factory):
        goal = goal_factory("g", history=[("2024-01-02", 1), ("2024-01-01", 2)]).with_tracking(progress=0)
        [updated] = reconciler.update_goal([goal], goal.model_copy(update={"title": "Run"}))
        assert updated.title == "Run"
        assert pairs(updated) == [("2024-01-01", 2), ("2024-01-02", 1)]
        assert updated.tracking.progress == 3

    def test_longer_history_wins_over_stale_edit(self, reconciler, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 1), ("2024-01-02", 2)])
        child = goal_factory("C", history=[("2024-01-01", 1), ("2024-01-02", 2)], parent="P")
        stale_edit = goal_factory("C", history=[("2024-01-01", 1)], parent="P", category="new")
        updated = by_id(reconciler.update_goal([parent, child], stale_edit))
        assert updated["C"].category == "new"
        assert pairs(updated["C"]) == [("2024-01-01", 1), ("2024-01-02", 2)]
        assert updated["C"].tracking.progress == 3
        assert "P" not in updated

    def test_edit_with_longer_history_propagates(self, reconciler, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 1)])
        child = goal_factory("C", history=[("2024-01-01", 1)], parent="P")
        edit = goal_factory("C", history=[("2024-01-01", 1), ("2024-01-05", 4)], parent="P")
        updated = by_id(reconciler.update_goal([parent, child], edit))
        assert pairs(updated["P"]) == [("2024-01-01", 1), ("2024-01-05", 4)]
        assert updated["P"].tracking.progress == 5

    def test_stale_total_on_longer_history_is_rederived(self, reconciler, store, goal_factory):
        parent = goal_factory("P", history=[("2024-01-01", 1), ("2024-01-02", 2)]).with_tracking(progress=99)
        child = goal_factory("C", history=[("2024-01-01", 1)], parent="P")
        updated = by_id(reconciler.update_goal([parent, child], child))
        assert updated["C"].tracking.progress == 3
        assert updated["P"].tracking.progress == 3
        for goal in store.written:
            assert goal.tracking.progress == history.total(goal.tracking.count_history)

    def test_unknown_goal(self, reconciler, goal_factory):
        with pytest.raises(GoalNotFoundError):
            reconciler.update_goal([], goal_factory("g"))


# =============================================================================
# lifecycle and good enough values
# =============================================================================

class TestGoalLifecycle:

    def test_add_goal_starts_empty(self, reconciler, store, goal_factory):
        draft = goal_factory("n", history=[("2024-01-01", 3)], status=GoalStatus.COMPLETED, completed_dates=["2024-01-01"])
        created = reconciler.add_goal([], draft)
        assert created.status == GoalStatus.NOT_STARTED
        assert created.tracking.count_history == []
        assert created.tracking.progress == 0
        assert created.tracking.completed_dates == []
        assert store.get_goal("n") == created

    def test_add_goal_rejects_duplicate_and_missing_parent(self, reconciler, goal_factory):
        with pytest.raises(InvalidInputError):
            reconciler.add_goal([goal_factory("n")], goal_factory("n"))
        with pytest.raises(GoalNotFoundError):
            reconciler.add_goal([], goal_factory("n", parent="ghost"))

    def test_delete_does_not_cascade(self, reconciler, store, goal_factory):
        goals = [goal_factory("P"), goal_factory("C", parent="P")]
        store.upsert_goals(goals)
        assert reconciler.delete_goal(goals, "P") is True
        assert store.get_goal("C").parent_goal_id == "P"
        with pytest.raises(GoalNotFoundError):
            reconciler.delete_goal(store.get_all_goals(), "P")

    def test_set_quarterly_value(self, reconciler, goal_factory):
        goal = goal_factory("ge", type=GoalType.GOOD_ENOUGH, horizon=TimeHorizon.ONGOING, quarterly_values={"Q1 2024": 10})
        [updated] = reconciler.set_quarterly_value([goal], "ge", "Q2-2024", 15)
        assert updated.tracking.quarterly_values == {"Q1 2024": 10, "Q2 2024": 15}
        assert pairs(updated) == [("Q1-2024", 10), ("Q2-2024", 15)]
        assert updated.tracking.progress == 25

    def test_set_quarterly_value_validation(self, reconciler, goal_factory):
        with pytest.raises(InvalidInputError):
            reconciler.set_quarterly_value([goal_factory("c")], "c", "Q1 2024", 1)
        goal = goal_factory("ge", type=GoalType.GOOD_ENOUGH)
        with pytest.raises(InvalidInputError):
            reconciler.set_quarterly_value([goal], "ge", "Q5 2024", 1)
