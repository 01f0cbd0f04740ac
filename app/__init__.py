"""Warehouse notification event pipeline.

Domain events recorded by the booking platform are turned into email, SMS and
push notifications by the use cases in :mod:`app.application`.
"""
