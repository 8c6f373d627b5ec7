from .entries_controller import entries_bp
from .system_controller import system_bp


def register_controllers(app):
    app.register_blueprint(system_bp)
    app.register_blueprint(entries_bp)
