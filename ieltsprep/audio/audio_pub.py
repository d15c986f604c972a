"""Audio publisher module for pub/sub event publishing."""

import itertools
import logging
from pubsub import pub
from ..models.events import AudioEvent

logger = logging.getLogger(__name__)

AUDIO_TOPIC = "audio.chunk"

_topic_counter = itertools.count(1)


def new_recorder_topic() -> str:
    """Return a subtopic of AUDIO_TOPIC unique to one recorder.

    Listeners on AUDIO_TOPIC itself still see every recorder's chunks.
    """
    return f"{AUDIO_TOPIC}.rec{next(_topic_counter)}"


class AudioPublisher:
    """Publishes audio events using pubsub.pub."""

    def __init__(self, topic: str = AUDIO_TOPIC):
        """Initialize audio publisher.

        Args:
            topic: Pub/sub topic name for audio events
        """
        self.topic = topic
        logger.debug(f"AudioPublisher initialized with topic: {topic}")

    def publish_audio_event(self, audio_event: AudioEvent) -> None:
        """Publish an audio event to the pub/sub topic.

        Args:
            audio_event: AudioEvent to publish
        """
        pub.sendMessage(self.topic, event=audio_event)
