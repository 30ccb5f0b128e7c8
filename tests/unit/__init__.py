"""
Unit tests for tatami.

Test individual components in isolation:
- Validation core (results, predicates, steps, number parsing, combinators, builder)
- Form data parsing and hierarchical keys
- Form entries and groups
- Paginator arithmetic
- Settings and logging configuration
"""
