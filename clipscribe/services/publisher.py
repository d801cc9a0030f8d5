"""Session event publisher for pub/sub notifications."""

import logging
from pubsub import pub

from ..models.events import RecorderTickEvent, SessionEvent

logger = logging.getLogger(__name__)

SESSION_TOPIC = "session.state"
RECORDER_TICK_TOPIC = "recorder.tick"


class SessionPublisher:
    """Publishes session and recorder events using pubsub.pub."""

    def __init__(self, session_topic: str = SESSION_TOPIC, tick_topic: str = RECORDER_TICK_TOPIC):
        """Initialize session publisher.

        Args:
            session_topic: Pub/sub topic name for session state changes
            tick_topic: Pub/sub topic name for recorder ticks
        """
        self.session_topic = session_topic
        self.tick_topic = tick_topic
        logger.info(f"SessionPublisher initialized with topics: {session_topic}, {tick_topic}")

    def publish_session_event(self, event: SessionEvent) -> None:
        pub.sendMessage(self.session_topic, event=event)
        logger.debug(f"Published session event: {event.event_type} ({event.event_id})")

    def publish_tick(self, elapsed_seconds: int) -> None:
        pub.sendMessage(self.tick_topic, event=RecorderTickEvent(elapsed_seconds=elapsed_seconds))
