"""Food card offer generation."""

import logging
import random
from typing import Optional, Sequence

from glucose_sim.core.determinism import make_rng
from glucose_sim.core.types import FoodCard, OfferConstraints

logger = logging.getLogger(__name__)


def _uniform_pick(candidates: list[FoodCard], rng: random.Random) -> FoodCard:
    shuffled = candidates.copy()
    rng.shuffle(shuffled)
    return shuffled[0]


def pick_card_for_tier(
    tier: int,
    foods: Sequence[FoodCard],
    used_ids: set[str],
    tag_counts: dict[str, int],
    max_same_tag: int,
    rng: random.Random,
) -> Optional[FoodCard]:
    """Pick one unused card of ``tier``.

    Falls back to ignoring the tag limit, then to any unused card of any
    tier. Returns None when every card is used.
    """
    unused = [f for f in foods if f.id not in used_ids]
    of_tier = [f for f in unused if f.tier == tier]

    candidates = [f for f in of_tier if tag_counts.get(f.tag, 0) < max_same_tag]
    if candidates:
        return _uniform_pick(candidates, rng)

    if of_tier:
        logger.debug("Tier %d: tag limit relaxed", tier)
        return _uniform_pick(of_tier, rng)

    if unused:
        logger.debug("Tier %d: no cards left, picking from any tier", tier)
        return _uniform_pick(unused, rng)

    return None


def generate_offer(
    template: Sequence[int],
    foods: Sequence[FoodCard],
    used_ids: set[str],
    tag_counts: dict[str, int],
    max_same_tag: int,
    rng: Optional[random.Random] = None,
) -> list[FoodCard]:
    """Build one offer, a card per tier in ``template``.

    ``used_ids`` and ``tag_counts`` are updated in place so consecutive
    offers in a batch do not repeat cards.

    Args:
        template: Required tier per offer slot
        foods: Card pool
        used_ids: Ids already offered (updated)
        tag_counts: Tags already offered (updated)
        max_same_tag: Tag limit before the constraint is relaxed
        rng: Random source

    Returns:
        Picked cards, possibly fewer than the template when the pool runs out
    """
    rng = rng or make_rng()
    offer = []

    for tier in template:
        card = pick_card_for_tier(tier, foods, used_ids, tag_counts, max_same_tag, rng)
        if card is None:
            continue
        offer.append(card)
        used_ids.add(card.id)
        tag_counts[card.tag] = tag_counts.get(card.tag, 0) + 1

    return offer


def generate_offers(
    templates: Sequence[Sequence[int]],
    foods: Sequence[FoodCard],
    constraints: Optional[OfferConstraints] = None,
    rng: Optional[random.Random] = None,
) -> list[list[FoodCard]]:
    """Build a batch of offers sharing one set of used ids and tag counts.

    Args:
        templates: One tier template per offer
        foods: Card pool
        constraints: Excluded card ids and tag limit
        rng: Random source

    Returns:
        One card list per template
    """
    constraints = constraints or OfferConstraints()
    rng = rng or make_rng()
    used_ids = set(constraints.no_repeat_card_ids)
    tag_counts: dict[str, int] = {}

    offers = [
        generate_offer(template, foods, used_ids, tag_counts, constraints.max_same_tag, rng)
        for template in templates
    ]
    logger.debug("Generated %d offers from a pool of %d cards", len(offers), len(foods))
    return offers
