"""
Core business logic for TeachTeam.

Submodules:
- exceptions: Selection error taxonomy
- selection: Display adapter, filtering, ranking, statistics and the service
- session: Reviewer session context
"""
