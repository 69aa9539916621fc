"""
Context string to state key encoding.

A rolling polynomial hash over the UTF-8 bytes of the context. Keys are
stable across processes so persisted tables stay meaningful after a
restart. Distinct contexts may collide; colliding contexts simply share
one Q-value row.
"""

HASH_MULTIPLIER = 31
HASH_MASK = 0xFFFFFFFF  # 32-bit
STATE_KEY_PREFIX = "s_"


def hash_context(context: str) -> int:
    """Return the 32-bit polynomial hash of ``context``."""
    value = 0
    for byte in context.encode("utf-8", errors="surrogatepass"):
        value = (value * HASH_MULTIPLIER + byte) & HASH_MASK
    return value


def encode_state(context: str) -> str:
    """
    Map a context string to its state key.

    Total over all strings, including empty, very long, non-ASCII and
    control-character input.
    """
    return f"{STATE_KEY_PREFIX}{hash_context(context):08x}"
