# ABOUTME: Business logic and orchestration layer
# ABOUTME: Batch extraction over harvested links and the service facade callers use

"""
Core Layer: Workflow orchestration

This layer handles:
- Batch windows with jitter, pauses and per-article skips
- Single-article and album request handling
- Boundary validation and structured error payloads

Data Flow: Requests → link discovery → batch extraction → ArticleRecord list
"""

from .orchestrator import BatchOrchestrator

# Import service on-demand to avoid pulling in the browser backend
# Use: from wechat2md.core.service import ExtractionService

__all__ = [
    "BatchOrchestrator",
]
