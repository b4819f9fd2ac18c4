"""
otp_auth.api.routers

HTTP routers.
"""

# Package marker.
