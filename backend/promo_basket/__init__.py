# backend/promo_basket/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate
from .hooks import HookRegistry



def create_app(config_object=Config, selector=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Promotion reconciler subscribes to the basket lifecycle hooks
    from .services.reconciler import BasketReconciler
    from .services.selector_service import RulePromotionSelector

    hooks = HookRegistry()
    reconciler = BasketReconciler(selector or RulePromotionSelector())
    hooks.register_subscriber(reconciler)
    app.extensions["promotion_hooks"] = hooks
    app.extensions["basket_reconciler"] = reconciler

    # Register blueprints
    from .routes.system import system_bp
    from .routes.basket import basket_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(basket_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
