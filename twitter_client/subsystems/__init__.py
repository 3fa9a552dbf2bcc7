"""
Subsystems - 子系统

职责:
- post: 自动发帖
- search: 话题搜索与回复（可选）
- interaction: 处理提及与回复
- space: Twitter Spaces 定期检查（可选）
"""

from .base import PeriodicSubsystem
from .interaction import InteractionSubsystem
from .post import PostSubsystem
from .search import SearchSubsystem
from .space import SpaceSubsystem

__all__ = [
    "PeriodicSubsystem",
    "PostSubsystem",
    "SearchSubsystem",
    "InteractionSubsystem",
    "SpaceSubsystem",
]
