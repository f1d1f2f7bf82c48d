"""Completion propagation from leaf tasks to their ancestors.

A container task (one with subtasks) is never completed directly. Its flag is
derived from its *direct leaf* children only: it is completed when it has at
least one leaf child and every leaf child is completed. Container children are
ignored by the test, so a container whose children are all containers never
auto-completes.

After a leaf changes, the rule is re-run on the parent, then the grandparent
and so on up to (but excluding) the root.
"""
import logging
from dataclasses import replace
from typing import Sequence

from business_logic.tree_operations import find_task, find_task_and_path, update_task
from models import Task

logger = logging.getLogger(__name__)


def derive_completion(task: Task) -> bool:
    """Compute a container's completed flag from its direct leaf children."""
    leaf_children = [child for child in task.subtasks if child.is_leaf]
    if not leaf_children:
        return False
    return all(child.completed for child in leaf_children)


def recompute_ancestors(root: Task, ancestor_ids: Sequence[str]) -> Task:
    """
    Re-derive the completed flag of each ancestor, nearest first.

    Args:
        root: Root of the tree
        ancestor_ids: Ids from the root down to the nearest ancestor of the
            changed node (a path as returned by find_task_and_path, without
            the changed node itself)

    Returns:
        The new root. Ancestors that are leaves (their last child was
        removed) keep their own flag; the root is never auto-completed.
    """
    nodes = (root,)
    for ancestor_id in reversed(ancestor_ids):
        ancestor = find_task(nodes, ancestor_id)
        if ancestor is None or ancestor.is_root or ancestor.is_leaf:
            continue

        derived = derive_completion(ancestor)
        if derived == ancestor.completed:
            continue

        logger.debug("Propagating completed=%s to task %s", derived, ancestor_id)
        if derived:
            # A closed task cannot stay in progress.
            nodes = update_task(
                nodes, ancestor_id,
                lambda node: replace(node.with_tracking_cleared(), completed=True),
            )
        else:
            nodes = update_task(nodes, ancestor_id, lambda node: replace(node, completed=False))
    return nodes[0]


def propagate_completion(root: Task, child_id: str) -> Task:
    """
    Re-derive completion for every ancestor of child_id.

    Returns root unchanged when child_id is not in the tree.
    """
    found = find_task_and_path((root,), child_id)
    if found is None:
        return root
    _, path = found
    return recompute_ancestors(root, path[:-1])
