"""
Thread Herder - Discord forum housekeeping bot

Thread Herder periodically sweeps the forum channels of every guild it is in
and keeps their posts moving through a simple lifecycle.

Core Components:

- **Lifecycle**: Resolves "solved"/"stale" forum tags by name, classifies each
  active thread by inactivity, applies or removes the stale tag and archives
  finished threads
- **Pinned Threads**: Treats pinned posts as read-only announcements and
  deletes any comment posted in them
- **Scheduler**: Runs one sequential sweep over all guilds on a fixed interval
- **Interactions**: ``/solved`` and ``/done`` slash commands plus a persistent
  "Mark as solved" button, routed through one dispatch table

Usage:
    from threadherder.main import main
    main()
"""
