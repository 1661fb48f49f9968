"""
Campus Placement Portal
Job drive pipeline and placement consent gate.

Architecture:
- MongoDB: job drives (applications, rounds, placed students embedded) and users
- FastAPI: REST surface under /api
- SMTP: OTP delivery for placement consent verification
"""

__version__ = "1.0.0"
__author__ = "Student"
