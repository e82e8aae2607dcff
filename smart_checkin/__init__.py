"""
Smart Check-in - self check-in for short-term rentals.

A guest registers a passkey against their reservation, then at arrival
proves possession of that passkey with a usernameless WebAuthn ceremony
and enters the secret code the host sent them. Both factors together
release the door PIN.
"""

__version__ = "1.0.0"
