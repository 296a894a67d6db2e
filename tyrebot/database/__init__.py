"""
The `database` package is responsible for all interactions with the application's database.

Contents:
    - config:
        Settings and the `Database` object (engine + session factory).
    - entities:
        SQLAlchemy entity models representing the database tables.
    - daos:
        Data Access Objects providing queries for the entities.
    - core:
        Transactional stores that the pipeline and the HTTP router call.
    - helpers:
        The `@transactional` decorator and session context.
"""
