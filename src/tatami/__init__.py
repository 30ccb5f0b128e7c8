"""
tatami: small helpers for web applications.

- validation: composable validation of untrusted input with nested,
  path-addressed errors (the core)
- form_data: URL-encoded form data and hierarchical field keys
- form: stateful form entries (text, lists, flags, groups)
- paginator: page arithmetic (limit/offset, clamping)
- integrations.starlette: read form data from a Starlette request
"""

__version__ = "0.1.0"
