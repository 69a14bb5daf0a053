"""
CloudSoft Modules
=================

Flask blueprint modules registered by the CloudSoft extension.
"""

__all__ = ['home', 'newsletter', 'ops']
