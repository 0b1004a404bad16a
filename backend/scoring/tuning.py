"""
Weight helpers for config editors (tuning sliders, PATCH /config).

The engine itself tolerates weights that do not sum to 1.0; these helpers
exist for callers that want to keep the set normalised while a user drags
one weight around.
"""

from models.config import DetectionWeights, HEURISTIC_NAMES

SUM_TOLERANCE = 0.001


def normalize_weights(weights: DetectionWeights) -> DetectionWeights:
    """Rescale so the six weights sum to 1.0. All-zero weights become an even split."""
    values = weights.as_dict()
    total = sum(values.values())
    if total <= 0:
        even = 1.0 / len(HEURISTIC_NAMES)
        return DetectionWeights(**{name: even for name in HEURISTIC_NAMES})
    return DetectionWeights(**{name: value / total for name, value in values.items()})


def rebalance_weights(weights: DetectionWeights, heuristic: str, value: float) -> DetectionWeights:
    """
    Set one weight and scale the other five proportionally to fill 1.0 - value.

    If the others are all zero the remainder is split evenly. Any rounding
    residue is folded into the largest of the others.
    """
    if heuristic not in HEURISTIC_NAMES:
        raise ValueError(f"Unknown heuristic {heuristic!r}")

    value = max(0.0, min(1.0, value))
    current = weights.as_dict()
    others = [name for name in HEURISTIC_NAMES if name != heuristic]
    remaining = 1.0 - value
    others_sum = sum(current[name] for name in others)

    updated = dict(current)
    for name in others:
        if others_sum == 0:
            updated[name] = max(0.0, remaining / len(others))
        else:
            updated[name] = max(0.0, current[name] * remaining / others_sum)
    updated[heuristic] = value

    drift = 1.0 - sum(updated.values())
    if abs(drift) > SUM_TOLERANCE:
        largest = max(others, key=lambda name: updated[name])
        updated[largest] = max(0.0, updated[largest] + drift)

    return DetectionWeights(**updated)
