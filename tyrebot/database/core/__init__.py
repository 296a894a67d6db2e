"""
Store layer: transactional operations that compose DAOs.

Contents
--------
- knowledge_store.KnowledgeStore: ranked search, admin CRUD, atomic bulk upload, categories
- conversation_store.ConversationStore: append turns, feedback updates, time-ranged reads
- analytics.AnalyticsAggregator: totals, feedback distribution, top questions
- admin_store.AdminStore: admin accounts and the product catalogue
"""
