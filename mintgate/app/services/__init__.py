"""Services package for the mint throttle.

This package provides:
- Client-side TPS rate limit checks for coupon minting
- Cancellable waiting until a mint is allowed
- Running a mint once the rate limit admits it
"""

from mintgate.app.services.mint_throttle import (
    MintThrottle,
    get_mint_throttle,
    reset_mint_throttle,
)

__all__ = [
    "MintThrottle",
    "get_mint_throttle",
    "reset_mint_throttle",
]
