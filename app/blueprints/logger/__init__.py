from app.blueprints.logger.routes import logger_bp

__all__ = ["logger_bp"]
