"""
Plain datatypes shared across Thread Herder.

- **lifecycle_datatypes.py**: Thread snapshots, thresholds, lifecycle actions
  and per-guild sweep reports.
- **interaction_datatypes.py**: Interaction kinds, requests and replies.
"""
