"""
Revisio Backend — Application Package Initializer
==================================================

What: Marks the `revisio` directory as a Python package.
Who:  Used by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Orchestration, Stages)  │  ← extraction → supplementation
    ├─────────────────────────────────────┤
    │         Schemas (Data Contracts)    │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │        LLM Client (Gemini)          │  ← hosted model, structured output
    └─────────────────────────────────────┘

    Nothing is persisted: a revision sheet lives only in the response that
    carries it back to the client.
"""

__version__ = "1.0.0"
