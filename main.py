"""
Main entry point for the Election Integrity Service.

Initializes storage, detection thresholds and services, and starts the
FastAPI server.
"""

import os

from dotenv import load_dotenv

load_dotenv()

from audit import AuditRepository, AuditTrailService
from common.db import IntegrityDB
from common.logging import configure_logging, get_logger
from fraud_detection import FraudDetectionService, FraudRepository, load_detection_config
from gateway import create_app
from verification import VerificationRepository, VoteVerificationService

log_level = os.getenv("LOG_LEVEL", "INFO")
configure_logging(log_level=log_level)
logger = get_logger(__name__)

if not os.getenv("DATABASE_URL"):
    logger.warning("env_file_missing_database_url", hint="Create .env file with DATABASE_URL")


def create_integrity_app(config_path: str = "config/default.yaml"):
    """
    Create and configure the Election Integrity application.

    Without a database the service still answers fraud detection requests
    over supplied votes; audit trail, fraud case and verification record
    routes need storage.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Configured FastAPI app
    """
    thresholds = load_detection_config(config_path)
    logger.info("detection_thresholds_loaded", config_path=config_path, **thresholds.model_dump())

    db = None
    try:
        db = IntegrityDB.from_env()
        db.initialize()
        if db.test_connection():
            db.create_schema()
            logger.info("integrity_database_connected")
        else:
            logger.warning("integrity_database_connection_failed", hint="Check DATABASE_URL and ensure database exists")
            db.close()
            db = None
    except Exception as e:
        logger.error(
            "integrity_database_initialization_failed",
            error=str(e),
            error_type=type(e).__name__,
            hint="Audit trail and fraud cases will be disabled. Check DATABASE_URL in .env file.",
        )
        db = None

    audit_service = None
    fraud_repository = None
    audit_repository = None
    verification_repository = None
    if db:
        audit_repository = AuditRepository(db)
        audit_service = AuditTrailService(audit_repository)
        fraud_repository = FraudRepository(db)
        verification_repository = VerificationRepository(db)
        logger.info("audit_service_initialized")

    fraud_service = FraudDetectionService.from_thresholds(
        thresholds,
        repository=fraud_repository,
        audit_repository=audit_repository,
    )

    app = create_app(
        fraud_service,
        audit_service=audit_service,
        verification_service=VoteVerificationService(
            verification_repository,
            receipt_key=os.getenv("VERIFICATION_RECEIPT_KEY"),
        ),
    )
    app.state.integrity_db = db

    @app.on_event("shutdown")
    async def close_database():
        """Close database connections on shutdown."""
        if app.state.integrity_db:
            logger.info("closing_integrity_database_connections")
            app.state.integrity_db.close()

    logger.info(
        "integrity_app_initialized",
        audit_enabled=audit_service is not None,
        fraud_cases_enabled=fraud_repository is not None,
        verification_records_enabled=verification_repository is not None,
    )
    return app


app = create_integrity_app(os.getenv("CONFIG_PATH", "config/default.yaml"))


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "starting_integrity_server",
        host="0.0.0.0",
        port=8000,
        docs_url="http://0.0.0.0:8000/docs",
    )

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
