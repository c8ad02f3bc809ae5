"""
Domain layer containing the publisher's core logic.

Submodules:
- publisher: capture loops, publication ledger, shutdown signal and the
  lifecycle controller that sequences them.
"""
