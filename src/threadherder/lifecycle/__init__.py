"""
Forum thread lifecycle: tag lookup, classification, execution and sweeping.

- **tag_resolver.py**: Resolves forum tags by name and caches each forum's
  mapping for the duration of one guild sweep.
- **thread_classifier.py**: Pure solved / stale-mark / stale-archive rules.
- **lifecycle_executor.py**: Turns one decision into one ``Thread.edit`` call.
- **pinned_sweeper.py**: Deletes comments from pinned announcement threads.
- **garbage_collector.py**: Runs all of the above over every guild in order.
"""
