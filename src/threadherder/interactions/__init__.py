"""
Interaction handling for Thread Herder.

- **dispatcher.py**: Dispatch table from ``(kind, name)`` to handler, plus the
  helper that sends the single reply.
- **forum_actions.py**: The ``mark-solved`` and ``prompt-done`` actions.
"""
