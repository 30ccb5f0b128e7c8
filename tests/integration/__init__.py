"""
Integration tests for tatami.

Test components together:
- Starlette application reading query/body form data (TestClient)
- Full signup flow (form data -> groups -> validation -> serialization)
"""
