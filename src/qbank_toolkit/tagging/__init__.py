"""
Tagging Package

Rule-based bulk topic tagging driven by keywords.
"""

from .auto_tag import AutoTagRule, find_candidates, apply_rule, run_auto_tag, suggest_tags

__all__ = ["AutoTagRule", "find_candidates", "apply_rule", "run_auto_tag", "suggest_tags"]
