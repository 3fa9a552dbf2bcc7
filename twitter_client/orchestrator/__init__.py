"""
Orchestrator - 子系统生命周期编排

职责:
- 会话就绪轮询
- 有序启动 / 停止子系统
"""

from .manager import LifecycleState, TwitterManager, build_twitter_manager

__all__ = ["LifecycleState", "TwitterManager", "build_twitter_manager"]
