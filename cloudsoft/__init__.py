"""
CloudSoft - Newsletter Web App
==============================

A small Flask site with:
- Newsletter sign-up, opt-out and subscriber listing (pages and JSON API)
- In-memory subscriber registry owned by the app
- Health endpoint for uptime monitors

Usage:
    from flask import Flask
    from cloudsoft import CloudSoft

    app = Flask(__name__)
    cloudsoft = CloudSoft(app)
    cloudsoft.registry.list_active()
"""

__version__ = '0.1.0'
__author__ = 'CloudSoft'

from .extension import CloudSoft
from .modules.newsletter import Subscriber, SubscriberRegistry, SubscriptionError, SubscriptionResult

__all__ = ['CloudSoft', 'Subscriber', 'SubscriberRegistry', 'SubscriptionError', 'SubscriptionResult']
