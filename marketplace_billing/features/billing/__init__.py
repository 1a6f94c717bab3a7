"""Billing feature: subscriptions, coupons, due diligence and scouting fees

Import from the submodules (``service``, ``api``, ``webhook_service``); the
package itself stays empty so the models can import pricing helpers without
pulling in the routers.
"""
