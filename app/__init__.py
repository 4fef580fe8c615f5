"""
NWP tourism map application package.

Layered the same way the HTTP layer consumes it:

  app/repositories/  — pure I/O: named JSON documents on disk and the
                       domain wrappers (assets, boundary, feedback).
  app/services/      — derived data computed from the repositories
                       (category statistics).

``tourism_api.py`` is the integration point: ``create_app`` builds an
``AppConfig``-driven store, the repositories and services, and attaches them
to the Flask application so route handlers never touch module globals.
"""
