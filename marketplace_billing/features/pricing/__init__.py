"""Pricing and fee engine: pure calculation functions

Import from the submodules directly (``coupons``, ``subscription_pricing``,
``scouting_fees``, ``summary``, ``currency``); ``domain`` is imported by the
record models, so this package keeps no eager imports.
"""
