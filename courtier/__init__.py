"""
Courtier - Rules engine for a Love Letter-style card game.

Two to four players each hold one card, draw a second on their turn and
play one of the two. The engine provides:
- Round setup and turn sequencing
- Deterministic card effect resolution
- Round and game lifecycle (showdowns, tokens, winners)
- An audit log whose hidden details are scoped to the players involved
- A session layer, HTTP API and bot policies on top
"""

__version__ = "0.1.0"
