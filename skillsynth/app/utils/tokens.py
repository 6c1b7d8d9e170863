"""
Deterministic token-cost estimation.

The estimate is a character heuristic (characters / 4, rounded up). It is
advisory and shared by fragments, prompts and the token budget tracker so
that all three agree on the same numbers.
"""

import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)
