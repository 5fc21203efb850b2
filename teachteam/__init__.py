"""
TeachTeam - tutor and lab-assistant selection core.

Applicant search, filtering, selection ranking and statistics over
course applications stored in MongoDB.
"""

__version__ = "0.1.0"
__app_name__ = "TeachTeam"
