"""
SiteLedger
AI Assistants package.

Assistants:
    - project_analyst: project status Q&A + correspondence drafting
"""

from siteledger.ai.assistants.project_analyst import ProjectAnalyst

__all__ = [
    "ProjectAnalyst",
]
