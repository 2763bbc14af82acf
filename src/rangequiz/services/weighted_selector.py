"""Weighted random selection of quiz items."""
import random
from typing import Optional, Sequence

from rangequiz.models.quiz_models import Item
from rangequiz.services.reference_loader import ensure_minimum_misses


class WeightedSelector:
    """Picks items with probability proportional to their miss count."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pick(self, items: Sequence[Item]) -> Optional[Item]:
        """Pick one item, or None if there are none."""
        if not items:
            return None

        total_weight = sum(ensure_minimum_misses(item.misses) for item in items)
        threshold = self.rng.random() * total_weight

        for item in items:
            threshold -= ensure_minimum_misses(item.misses)
            if threshold <= 0:
                return item

        # Float drift can leave a sliver of threshold after the last item
        return items[-1]
