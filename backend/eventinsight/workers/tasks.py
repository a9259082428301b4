"""ARQ background tasks for auth housekeeping."""
from typing import Dict, Any

from eventinsight.database import SessionLocal
from eventinsight.models import Session, VerificationToken
from eventinsight.utils.logger import logger
from eventinsight.utils.serialization import utc_now


async def cleanup_expired_auth(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    Delete expired sessions and verification tokens.

    Expired rows are already rejected on read; this keeps the tables small.

    Args:
        ctx: ARQ context

    Returns:
        Dict with success status and deleted row counts
    """
    db = SessionLocal()
    now = utc_now()

    try:
        sessions_deleted = (
            db.query(Session).filter(Session.expires <= now).delete(synchronize_session=False)
        )
        tokens_deleted = (
            db.query(VerificationToken)
            .filter(VerificationToken.expires <= now)
            .delete(synchronize_session=False)
        )
        db.commit()

        logger.info(
            f"Auth cleanup removed {sessions_deleted} sessions and {tokens_deleted} verification tokens"
        )
        return {
            "success": True,
            "sessions_deleted": sessions_deleted,
            "verification_tokens_deleted": tokens_deleted,
        }

    except Exception as e:
        db.rollback()
        logger.error(f"Auth cleanup failed: {e}", exc_info=True)
        return {"success": False, "error": str(e)}

    finally:
        db.close()
