import logging
import time
from .config import settings

logger = logging.getLogger(__name__)

# Seconds to wait after a failed connect before trying again
RETRY_INTERVAL = 60.0

class CassandraClient:
    def __init__(self):
        self.cluster = None
        self.session = None
        self.retry_at = 0.0

    def build_cluster(self):
        from cassandra.cluster import Cluster

        return Cluster([settings.CASSANDRA_HOST], port=settings.CASSANDRA_PORT)

    def connect(self):
        self.cluster = self.build_cluster()
        try:
            self.session = self.cluster.connect()
            self.create_keyspace()
            self.session.set_keyspace(settings.CASSANDRA_KEYSPACE)
            self.create_tables()
        except Exception:
            self.close()
            self.retry_at = time.monotonic() + RETRY_INTERVAL
            raise
        self.retry_at = 0.0
        logger.info("Connected to Cassandra keyspace %s", settings.CASSANDRA_KEYSPACE)

    def create_keyspace(self):
        self.session.execute(f"""
            CREATE KEYSPACE IF NOT EXISTS {settings.CASSANDRA_KEYSPACE}
            WITH replication = {{'class': 'SimpleStrategy', 'replication_factor': '1'}}
        """)

    def create_tables(self):
        # Activity log of domain events, newest first per course
        self.session.execute("""
            CREATE TABLE IF NOT EXISTS event_logs (
                event_id uuid,
                event_type text,
                user_id text,
                course_id text,
                details text,
                event_time timestamp,
                PRIMARY KEY (course_id, event_time, event_id)
            ) WITH CLUSTERING ORDER BY (event_time DESC, event_id ASC);
        """)

    def close(self):
        if self.cluster:
            self.cluster.shutdown()
            self.cluster = None
            self.session = None

cassandra_client = CassandraClient()

def get_cassandra_session():
    if not settings.CASSANDRA_ENABLED:
        return None
    if cassandra_client.session is None:
        if time.monotonic() < cassandra_client.retry_at:
            return None
        cassandra_client.connect()
    return cassandra_client.session
