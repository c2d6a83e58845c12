"""
Domain models — pydantic types shared by the reconciler and the deploy flow.
"""
