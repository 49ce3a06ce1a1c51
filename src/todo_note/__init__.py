"""
Simple Todo Note store.

A local, single-writer SQLite store for an ordered todo list plus the window
and UI preferences of the desktop shell, exposed over a small FastAPI app.
Build the app with `todo_note.main.create_app()`.
"""

__version__ = "0.1.0"
