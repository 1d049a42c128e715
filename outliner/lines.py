"""Group quantized boxes into text lines for underline and strikeout strokes."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, TypedDict

# (x1, y1, x2) in quantized page units; the baseline y2 is the grouping key.
LineBox = Tuple[float, float, float]
# (x1, y1, x2, y2) in quantized page units.
LineRun = Tuple[float, float, float, float]


class LineGroup(TypedDict):
    boxes: List[LineBox]
    min_y1: float


def group_by_baseline(boxes: Iterable[Tuple[float, float, float, float]]) -> Dict[float, LineGroup]:
    """Bucket ``(x1, y1, x2, y2)`` boxes by their exact baseline ``y2``."""
    groups: Dict[float, LineGroup] = {}
    for x1, y1, x2, y2 in boxes:
        group = groups.get(y2)
        if group is None:
            group = {"boxes": [], "min_y1": y1}
            groups[y2] = group
        group["boxes"].append((x1, y1, x2))
        group["min_y1"] = min(group["min_y1"], y1)
    return groups


def merge_baselines(groups: Dict[float, LineGroup]) -> Dict[float, LineGroup]:
    """Fold each baseline into the previous one when it is at least as tall.

    Baselines are visited bottom-up in ascending ``y2``. A group absorbs the
    group kept just before it when that group's top (``min_y1``) is not above
    its own, which is how jittered fragments of one visual line show up.
    """
    merged: Dict[float, LineGroup] = {}
    previous: float | None = None
    for baseline in sorted(groups):
        current: LineGroup = {
            "boxes": list(groups[baseline]["boxes"]),
            "min_y1": groups[baseline]["min_y1"],
        }
        if previous is not None and merged[previous]["min_y1"] >= current["min_y1"]:
            folded = merged.pop(previous)
            current = {
                "boxes": folded["boxes"] + current["boxes"],
                "min_y1": min(folded["min_y1"], current["min_y1"]),
            }
        merged[baseline] = current
        previous = baseline
    return merged


def partition_group(baseline: float, group: LineGroup) -> List[LineRun]:
    """Split one line into runs wherever the horizontal gap exceeds two line heights."""
    ordered = sorted(group["boxes"], key=lambda box: box[0])
    if not ordered:
        return []
    max_gap = 2.0 * (baseline - group["min_y1"])

    runs: List[List[float]] = [list(ordered[0])]
    for x1, y1, x2 in ordered[1:]:
        last = runs[-1]
        if x1 - last[2] > max_gap:
            runs.append([x1, y1, x2])
            continue
        last[0] = min(last[0], x1)
        last[1] = min(last[1], y1)
        last[2] = max(last[2], x2)
    return [(x1, y1, x2, baseline) for x1, y1, x2 in runs]


def compute_line_runs(boxes: Iterable[Tuple[float, float, float, float]]) -> List[LineRun]:
    groups = merge_baselines(group_by_baseline(boxes))
    runs: List[LineRun] = []
    for baseline, group in groups.items():
        runs.extend(partition_group(baseline, group))
    return runs


__all__ = [
    "LineBox",
    "LineRun",
    "LineGroup",
    "group_by_baseline",
    "merge_baselines",
    "partition_group",
    "compute_line_runs",
]
