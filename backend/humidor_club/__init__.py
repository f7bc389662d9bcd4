"""
Humidor Club backend.
"""
