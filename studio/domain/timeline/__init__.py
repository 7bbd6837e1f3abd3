"""
Timeline Domain

Session timeline automation: per-session-type templates, generated task
timelines, completion tracking, AI content approval and rescheduling.
"""

from .router import router

__all__ = ["router"]
