from typing import Dict, List, Optional, Sequence, Tuple

from models import Goal


def index_by_id(goals: Sequence[Goal]) -> Dict[str, Goal]:
    return {goal.id: goal for goal in goals}


def find_parent(goals_by_id: Dict[str, Goal], goal: Goal) -> Optional[Goal]:
    """The goal's parent, or None when it has none or the reference dangles"""
    if not goal.parent_goal_id or goal.parent_goal_id == goal.id:
        return None
    return goals_by_id.get(goal.parent_goal_id)


def related_goals(all_goals: Sequence[Goal], goal: Goal) -> List[Goal]:
    """
    The goal, its parent (if resolvable) and its direct children.

    Only one hop is followed in either direction, so cycles cannot recurse.
    """
    related = [goal]
    seen = {goal.id}

    parent = find_parent(index_by_id(all_goals), goal)
    if parent is not None:
        related.append(parent)
        seen.add(parent.id)

    for candidate in all_goals:
        if candidate.parent_goal_id == goal.id and candidate.id not in seen:
            related.append(candidate)
            seen.add(candidate.id)

    return related


def all_linked_pairs(all_goals: Sequence[Goal]) -> List[Tuple[Goal, Goal]]:
    """Every (child, parent) pair in the collection"""
    goals_by_id = index_by_id(all_goals)
    pairs = []
    for goal in all_goals:
        parent = find_parent(goals_by_id, goal)
        if parent is not None:
            pairs.append((goal, parent))
    return pairs


def is_linked(all_goals: Sequence[Goal], goal: Goal) -> bool:
    return len(related_goals(all_goals, goal)) > 1
