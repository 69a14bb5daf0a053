"""
Home Module
===========

Public site pages and the shared look of the site:
- Landing page and privacy page
- layout.html base template and site CSS
- HTML error pages (JSON errors for /api/ paths)

CloudSoft always registers this module because every other page extends its layout.
"""

from flask import Blueprint

home_bp = Blueprint(
    'home',
    __name__,
    template_folder='templates',
    static_folder='static',
    static_url_path='/cloudsoft/static'
)

from . import routes

__all__ = ['home_bp']
