# Services package init
"""
Revisio Backend — Services Layer
=================================

What:  Pipeline logic sitting between routes (HTTP) and the hosted model.

Service Inventory:
    - LLMService (abstract): Interface for schema-constrained generation
    - GeminiService: Concrete implementation using Google Gemini
    - ExtractionService: Stage 1, content → revision points
    - SupplementationService: Stage 2, heading string → Markdown sheet
    - RevisionService: Orchestrates both stages into a RevisionSheet
    - ImageService: Upload validation and data URI encoding
    - sanitizer / localization / outcomes: helpers used by the stages
"""
