"""
Discord UI components for Thread Herder.

- **forum_views.py**: Persistent "Mark as solved" button view.
"""
