"""Translation manifest flattening."""

from typing import Any, Dict, Iterable, List, Optional

NOT_AVAILABLE = "n/a"

_END = object()


def collect_messages(nodes: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Concatenate the messages of a derivative tree in pre-order.

    Each node contributes its own ``messages`` before those of its
    ``children``; siblings keep their listed order. Depth is unbounded.
    """
    messages: List[Dict[str, Any]] = []
    # Explicit stack so pathological manifests cannot hit the recursion limit
    stack = [iter(nodes or [])]
    while stack:
        node = next(stack[-1], _END)
        if node is _END:
            stack.pop()
            continue
        messages.extend(node.get("messages") or [])
        children = node.get("children")
        if children:
            stack.append(iter(children))
    return messages


def flatten_manifest(manifest: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Reduce a Model Derivative manifest to ``{status, progress, messages}``.

    Args:
        manifest: Manifest as returned by APS, or None when no manifest
            exists yet for the URN

    Returns:
        ``{"status": "n/a"}`` when there is no manifest, otherwise the
        root status and progress plus every message in the tree
    """
    if manifest is None:
        return {"status": NOT_AVAILABLE}

    return {
        "status": manifest.get("status"),
        "progress": manifest.get("progress"),
        "messages": collect_messages(manifest.get("derivatives")),
    }
