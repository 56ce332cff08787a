"""maintctl - maintenance-window controller for an on-premises analytics server.

Stops the server's OS service safely, runs a payload (database dump, waiting
on a remote node), and starts it again.
"""

__version__ = "0.1.0"
