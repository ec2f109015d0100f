"""
Background scheduling for Thread Herder.

- **gc_scheduler.py**: Fixed-interval asyncio task that triggers one forum
  garbage collection sweep per tick, never running two sweeps at once.
"""
