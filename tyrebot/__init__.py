"""
Tyre support assistant backend.

Answers customer questions with a generative model grounded in a curated
knowledge base, logs every exchange for feedback and analytics, and exposes
an administration API for the knowledge base.
"""

__version__ = "0.1.0"
