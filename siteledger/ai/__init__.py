"""
SiteLedger
AI module.

Submodules:
    - gateway: LLM Gateway (provider routing: Gemini, local stub)
    - assistants: task-specific helpers built on the gateway
"""
