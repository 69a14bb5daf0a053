"""
CloudSoft Flask Extension
=========================

Wires the CloudSoft modules into a Flask app:

    app = Flask(__name__)
    cloudsoft = CloudSoft(app, {'brand_name': 'CloudSoft', 'features': {'ops': False}})

The extension owns the app's SubscriberRegistry and subscription notifier.
Pass your own to share or stub them:

    CloudSoft(app, registry=SubscriberRegistry(), notifier=LogNotifier())

Route code reaches them through app.extensions['cloudsoft'].
"""

import logging
import time
from datetime import datetime

from flask_cors import CORS

from .core.config import Config
from .modules.home import home_bp
from .modules.newsletter import newsletter_api_bp, newsletter_bp
from .modules.newsletter.notifications import build_notifier
from .modules.newsletter.registry import SubscriberRegistry
from .modules.ops import ops_health_bp

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'home': True,
    'newsletter': True,
    'newsletter_api': True,
    'ops': True,
}

# Registration order; home first so its error handlers and layout are in place
_BLUEPRINTS = (
    ('home', home_bp),
    ('newsletter', newsletter_bp),
    ('newsletter_api', newsletter_api_bp),
    ('ops', ops_health_bp),
)


class CloudSoft:
    """Flask extension owning the newsletter registry and site modules"""

    def __init__(self, app=None, config=None, registry=None, notifier=None):
        self._config = dict(config or {})
        self.registry = registry if registry is not None else SubscriberRegistry()
        self.notifier = notifier
        self.started_at = time.time()
        self._registered = []
        self._app = None

        if app is not None:
            self.init_app(app)

    @property
    def features(self):
        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))
        # Every page extends the home layout
        features['home'] = True
        return features

    def init_app(self, app):
        """Apply config defaults, register modules and store the extension on the app"""
        # Registered modules and owned registry belong to a single app
        if self._app is not None:
            raise RuntimeError("CloudSoft is already initialised on another app; create one CloudSoft per app")
        self._app = app

        self._apply_config_defaults(app)
        self._setup_logging(app)

        if self.notifier is None:
            self.notifier = build_notifier(app.config)

        self._register_blueprints(app)
        self._setup_cors(app)
        self._setup_context_processor(app)

        app.extensions['cloudsoft'] = self
        logger.info(f"CloudSoft initialised with modules: {', '.join(self._registered)}")

    def _apply_config_defaults(self, app):
        # INTEGRATION: values already on app.config win over Config/env defaults
        for key in Config.APP_KEYS:
            app.config.setdefault(key, getattr(Config, key))
        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        if 'brand_name' in self._config:
            app.config['BRAND_NAME'] = self._config['brand_name']

    def _setup_logging(self, app):
        level_name = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
        level = getattr(logging, level_name, logging.INFO)
        package_logger = logging.getLogger('cloudsoft')
        package_logger.setLevel(level)
        if not logging.getLogger().handlers and not package_logger.handlers:
            logging.basicConfig(level=level)

    def _register_blueprints(self, app):
        features = self.features
        for name, blueprint in _BLUEPRINTS:
            if not features.get(name):
                continue
            if blueprint.name in app.blueprints:
                logger.warning(f"Blueprint '{blueprint.name}' already registered, skipping")
                continue
            app.register_blueprint(blueprint)
            self._registered.append(name)

    def _setup_cors(self, app):
        if 'newsletter_api' not in self._registered:
            return
        origins = app.config.get('CORS_ORIGINS') or '*'
        if origins != '*':
            origins = [o.strip() for o in origins.split(',') if o.strip()]
        CORS(app, resources={r'/api/*': {'origins': origins}})

    def _setup_context_processor(self, app):
        @app.context_processor
        def inject_cloudsoft():
            return {
                'cloudsoft_config': self.get_template_config(app),
                'brand_name': app.config.get('BRAND_NAME') or Config.BRAND_NAME,
                'current_year': datetime.now().year,
            }

    def get_template_config(self, app):
        return {
            'brand_name': app.config.get('BRAND_NAME') or Config.BRAND_NAME,
            'features': self.features,
            'registered_modules': list(self._registered),
        }

    def get_registered_modules(self):
        """Names of the modules registered on the app"""
        return list(self._registered)
