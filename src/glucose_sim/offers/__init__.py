"""Offer generation for food card choices."""

from glucose_sim.offers.offer_algorithm import generate_offer, generate_offers, pick_card_for_tier

__all__ = [
    "generate_offer",
    "generate_offers",
    "pick_card_for_tier",
]
