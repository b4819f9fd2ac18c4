"""
otp_auth.identity

Identity Service boundary.

Responsibilities:
- Define the interface the auth layer uses to reach the hosted identity platform.
- Provide the Appwrite REST client and an in-memory backend for dev/test.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The auth service depends on `identity.base.IdentityService`, never on httpx directly.
