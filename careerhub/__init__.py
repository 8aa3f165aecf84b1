"""
careerhub - client-side logic for a job seeker's platform account.

Covers the pre-apply match feed, timed interview practice, coaching
bookings and goals, references and the feature-flag admin, on top of a
bearer-token HTTP API.
"""

__version__ = "0.4.0"
