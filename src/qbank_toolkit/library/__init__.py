"""
Library Package

Caller-side services built on the core: the cached question library and
study-session navigation.
"""

from .service import QuestionLibrary, MetadataDefaults
from .study import StudySession

__all__ = ["QuestionLibrary", "MetadataDefaults", "StudySession"]
