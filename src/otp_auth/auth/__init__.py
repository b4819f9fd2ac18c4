"""
otp_auth.auth

Authentication package.

Responsibilities:
- Auth domain models and errors.
- Session cookie handling.
- The passcode sign-up / sign-in orchestration service.
"""

# Package marker.
