"""
Bots module - Automated players.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / FirstLegalPolicy: Baselines for tests and simulations
- CautiousPolicy: Plays its lowest card
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy, CautiousPolicy

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "CautiousPolicy",
]
