"""
API Package - FastAPI Router • Models • JWT Utils • CSV Rows
============================================================

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Chat (/api/chat): one knowledge-grounded turn per request
      • Feedback (/api/feedback): label a stored turn
      • Admin: login, knowledge-base CRUD, CSV bulk upload, categories,
        analytics, products
      • Health (/health)

- models
    Pydantic data contracts (chat, feedback, analytics, knowledge entries, products).

- utils
    JWT helpers:
      • create_access_token(payload, settings) - issues signed JWTs with exp
      • verify_token(token, settings) - returns a typed TokenVerification

- csv_rows
    Lazy, restartable parsing of knowledge-base CSV uploads.
"""
