"""Traversal and copy-on-write mutation of the nested task tree.

Every function takes a sequence of sibling nodes (usually ``(tree.root,)``)
and never modifies it: updates return new tuples in which only the nodes on
the path to the target are replaced, all other subtrees are shared.

Traversal is depth-first with children visited in stored order. Ids are
unique by construction; if they ever collide the first match wins.

Functions:
    find_task_and_path: Locate a node and the ids on the path from the top
    find_task: Locate a node by id
    iter_tasks: Iterate over all nodes depth-first
    contains_task: Check whether a subtree holds an id
    update_task: Replace one node via a transformation function
    delete_task: Remove a node and its whole subtree
    insert_subtask: Add a child to a node at a position
"""
from typing import Callable, Iterator, List, Optional, Sequence, Tuple
from dataclasses import replace
from models import Task

TaskPath = List[str]


def find_task_and_path(nodes: Sequence[Task], task_id: str,
                       path: Optional[TaskPath] = None) -> Optional[Tuple[Task, TaskPath]]:
    """
    Find a task and the path leading to it.

    Args:
        nodes: Sibling nodes to search (and their descendants)
        task_id: Id of the task to find
        path: Ids of the ancestors of ``nodes`` (used by the recursion)

    Returns:
        Tuple of (task, path) where path lists ancestor ids from the top with
        the task's own id last, or None if not found

    Example:
        >>> find_task_and_path((root,), child.id)
        (child, [root.id, parent.id, child.id])
    """
    path = path or []
    for node in nodes:
        current_path = path + [node.id]
        if node.id == task_id:
            return node, current_path
        if node.subtasks:
            found = find_task_and_path(node.subtasks, task_id, current_path)
            if found:
                return found
    return None


def find_task(nodes: Sequence[Task], task_id: str) -> Optional[Task]:
    """Find a task by id, or None."""
    found = find_task_and_path(nodes, task_id)
    return found[0] if found else None


def iter_tasks(nodes: Sequence[Task]) -> Iterator[Task]:
    """Yield every node depth-first, parents before their children."""
    for node in nodes:
        yield node
        yield from iter_tasks(node.subtasks)


def contains_task(node: Task, task_id: str) -> bool:
    """Check whether task_id is node itself or one of its descendants."""
    return find_task((node,), task_id) is not None


def update_task(nodes: Sequence[Task], task_id: str,
                update_fn: Callable[[Task], Task]) -> Tuple[Task, ...]:
    """
    Replace the first node with task_id by ``update_fn(node)``.

    Args:
        nodes: Sibling nodes to search
        task_id: Id of the task to update
        update_fn: Function returning the replacement node

    Returns:
        New tuple of siblings. When task_id is not found the input is returned
        as a tuple with every node unchanged.
    """
    result = list(nodes)
    for i, node in enumerate(nodes):
        if node.id == task_id:
            result[i] = update_fn(node)
            return tuple(result)
        if node.subtasks and contains_task(node, task_id):
            result[i] = replace(node, subtasks=update_task(node.subtasks, task_id, update_fn))
            return tuple(result)
    return tuple(result)


def delete_task(nodes: Sequence[Task], task_id: str) -> Tuple[Tuple[Task, ...], Optional[Task]]:
    """
    Remove the first node with task_id together with its subtree.

    Args:
        nodes: Sibling nodes to search
        task_id: Id of the task to remove

    Returns:
        Tuple of (new siblings, removed node). The removed node is None when
        task_id was not found.
    """
    result = list(nodes)
    for i, node in enumerate(nodes):
        if node.id == task_id:
            del result[i]
            return tuple(result), node
        if node.subtasks:
            new_subtasks, removed = delete_task(node.subtasks, task_id)
            if removed is not None:
                result[i] = replace(node, subtasks=new_subtasks)
                return tuple(result), removed
    return tuple(result), None


def insert_subtask(nodes: Sequence[Task], parent_id: str, new_task: Task,
                   position: Optional[int] = None) -> Tuple[Task, ...]:
    """
    Add new_task as a child of parent_id.

    Args:
        nodes: Sibling nodes to search
        parent_id: Id of the parent task
        new_task: The node to insert
        position: Index among the parent's children (clamped); None appends

    Returns:
        New tuple of siblings
    """
    def add_child(parent: Task) -> Task:
        children = list(parent.subtasks)
        if position is None:
            children.append(new_task)
        else:
            children.insert(max(0, min(position, len(children))), new_task)
        return replace(parent, subtasks=tuple(children))

    return update_task(nodes, parent_id, add_child)
