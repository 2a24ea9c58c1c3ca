"""FurniFlip: turns furniture photos into marketplace inventory.

Submodules:
    config     — environment-driven settings
    db         — Supabase helpers (vocabularies, catalogs, inventory rows, storage)
    agents     — Google Lens scraper and the LLM extraction agent
    tools      — browser page pool, per-image retriever, OpenAI client, JPEG conversion
    workflow   — pipeline orchestrator, similar-listing matcher, catalog creation
    main       — FastAPI app
"""
