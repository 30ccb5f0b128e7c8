"""
Framework glue.

- starlette.py: read a request's query string / URL-encoded body as form data
"""
