import json
import logging
import uuid
from datetime import datetime
from typing import Optional

from coursedesk.core import cassandra_db

logger = logging.getLogger(__name__)


def log_event(event_type: str, user_id: str, course_id: Optional[str], details: dict):
    """Append a domain event to the activity log; failures never reach the caller."""
    try:
        session = cassandra_db.get_cassandra_session()
        if not session:
            return
        query = """
            INSERT INTO event_logs (event_id, event_type, user_id, course_id, details, event_time)
            VALUES (%s, %s, %s, %s, %s, %s)
        """
        session.execute(query, (
            uuid.uuid4(), event_type, user_id, course_id or "", json.dumps(details), datetime.utcnow()
        ))
    except Exception as e:
        logger.warning("Failed to log event %s to Cassandra: %s", event_type, e)
