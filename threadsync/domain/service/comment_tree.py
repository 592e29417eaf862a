"""Comment forest construction and structural updates.

The forum API returns comments as a flat list. ``build_comment_tree`` turns
that list into a forest of immutable ``CommentNode`` values; the remaining
functions derive new forests from existing ones without mutating them.
Untouched subtrees are shared between the old and the new forest, only the
path down to a changed node is copied.
"""

from collections.abc import Callable, Iterable
from typing import Optional

from threadsync.domain.model import Comment, CommentForest, CommentNode
from threadsync.domain.value import CommentId

NodeUpdate = Callable[[CommentNode], CommentNode]


def build_comment_tree(comments: Iterable[Comment]) -> CommentForest:
    """Build a comment forest from a flat, parent-referencing list.

    Algorithm:
    1. Index comments by id, keeping input order
    2. Attach each comment to its parent's reply list in input order, or to
       the root list when it has no parent, its parent is not in the input,
       or it names itself as parent
    3. Comments caught in a parent cycle are unreachable from any root; the
       first of them in input order is promoted to a root, breaking the cycle
    4. Assemble nodes bottom-up, iteratively, so deep reply chains never
       exhaust the interpreter stack

    Later duplicates of an id already seen are ignored so that every comment
    appears exactly once. The input is never mutated and the result depends
    only on the input.

    Args:
        comments: Flat comments in server order

    Returns:
        Root nodes in input order, each with replies in input order
    """
    records: dict[CommentId, Comment] = {}
    for comment in comments:
        records.setdefault(comment.id, comment)
    order = list(records)

    children: dict[CommentId, list[CommentId]] = {cid: [] for cid in order}
    root_ids: set[CommentId] = set()
    for cid in order:
        parent_id = records[cid].parent_comment_id
        if parent_id is not None and parent_id != cid and parent_id in records:
            children[parent_id].append(cid)
        else:
            root_ids.add(cid)

    # Tree edges actually used; a reply pointing back into a cycle is skipped
    attached: dict[CommentId, list[CommentId]] = {cid: [] for cid in order}
    visited: set[CommentId] = set()

    def walk(start: CommentId) -> None:
        visited.add(start)
        stack = [start]
        while stack:
            cid = stack.pop()
            for child in children[cid]:
                if child not in visited:
                    visited.add(child)
                    attached[cid].append(child)
                    stack.append(child)

    for cid in order:
        if cid in root_ids:
            walk(cid)
    for cid in order:
        if cid not in visited:
            root_ids.add(cid)
            walk(cid)

    built: dict[CommentId, CommentNode] = {}
    for root in (cid for cid in order if cid in root_ids):
        stack: list[tuple[CommentId, bool]] = [(root, False)]
        while stack:
            cid, expanded = stack.pop()
            if expanded:
                built[cid] = CommentNode(
                    comment=records[cid],
                    replies=tuple(built[child] for child in attached[cid]),
                )
            else:
                stack.append((cid, True))
                stack.extend((child, False) for child in reversed(attached[cid]))

    return tuple(built[cid] for cid in order if cid in root_ids)


def patch_comment(
    forest: CommentForest, target_id: CommentId, update: NodeUpdate
) -> CommentForest:
    """Replace the node with ``target_id`` by ``update(node)``.

    Walks the forest depth-first. Nodes off the target path are reused as-is;
    when the target is absent the very same forest object is returned, which
    callers use to detect a miss.

    Args:
        forest: Forest to patch
        target_id: Id of the node to replace
        update: Function producing the replacement node

    Returns:
        New forest, or ``forest`` itself if nothing matched
    """
    changed = False
    patched: list[CommentNode] = []
    for node in forest:
        if node.comment.id == target_id:
            replacement = update(node)
            changed = True
        else:
            replies = patch_comment(node.replies, target_id, update)
            if replies is node.replies:
                replacement = node
            else:
                replacement = node.model_copy(update={"replies": replies})
                changed = True
        patched.append(replacement)
    return tuple(patched) if changed else forest


def update_comment_fields(
    forest: CommentForest, comment_id: CommentId, **changes
) -> CommentForest:
    """Patch fields of a single comment anywhere in the forest."""

    def apply(node: CommentNode) -> CommentNode:
        return node.model_copy(
            update={"comment": node.comment.model_copy(update=changes)}
        )

    return patch_comment(forest, comment_id, apply)


def insert_reply(
    forest: CommentForest, parent_id: CommentId, reply: CommentNode
) -> tuple[CommentForest, bool]:
    """Append ``reply`` to the replies of ``parent_id`` at any depth.

    Returns:
        Tuple of (forest, found). When the parent is missing the forest is
        returned unchanged and ``found`` is False.
    """

    def append(node: CommentNode) -> CommentNode:
        return node.model_copy(update={"replies": (*node.replies, reply)})

    patched = patch_comment(forest, parent_id, append)
    return patched, patched is not forest


def find_comment(
    forest: CommentForest, comment_id: CommentId
) -> Optional[CommentNode]:
    """Find a node by id, depth-first."""
    for node in forest:
        if node.comment.id == comment_id:
            return node
        found = find_comment(node.replies, comment_id)
        if found is not None:
            return found
    return None


def count_comments(forest: CommentForest) -> int:
    """Count every node in the forest."""
    return sum(1 + count_comments(node.replies) for node in forest)


def mark_top_level_best_answer(
    forest: CommentForest, comment_id: CommentId
) -> CommentForest:
    """Flag ``comment_id`` as best answer and clear the flag on its siblings.

    Only top-level comments are toggled. Nested replies keep whatever flag
    they had, so a reply previously marked best stays marked.
    """
    return tuple(
        node.model_copy(
            update={
                "comment": node.comment.model_copy(
                    update={"best_answer": node.comment.id == comment_id}
                )
            }
        )
        for node in forest
    )
