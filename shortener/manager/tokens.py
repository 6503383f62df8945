"""
Short token generation.

Tokens are 6 to 9 characters drawn uniformly from the 62-character
alphanumeric alphabet; the length itself is uniform over [6, 10).

The generator is stateless and never consults storage, so it gives no
uniqueness guarantee. Storage detects the rare clash (`TokenTakenError`)
and `URLManager` retries with a fresh token.

Notes:
    - Uses the module-level `random` PRNG (non-cryptographic). Its methods are
      safe to call from several threads at once.
"""

import random
import string

TOKEN_ALPHABET = string.ascii_letters + string.digits
MIN_TOKEN_LENGTH = 6
MAX_TOKEN_LENGTH = 10  # exclusive


def generate_token(min_length: int = MIN_TOKEN_LENGTH, max_length: int = MAX_TOKEN_LENGTH) -> str:
    """Return a random token whose length is in [min_length, max_length)."""
    if min_length < 1 or max_length <= min_length:
        raise ValueError("token length range must be non-empty and positive")
    length = random.randrange(min_length, max_length)
    return "".join(random.choices(TOKEN_ALPHABET, k=length))
