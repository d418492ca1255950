"""Webhook receiver resource.

Usage
-----
Import the receiver for route registration::

    from herald.api.webhook.resources import WebhookResource
"""
