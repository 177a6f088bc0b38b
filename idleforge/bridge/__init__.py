"""Bridge layer between idleforge and the session host.

Modules
-------
session_host
    ``SessionHost`` Protocol plus ``HttpSessionHost``: session lookup,
    feedback prompts, and the lifecycle event stream.
"""
