"""Kafka sink for alert transitions.

Each time the high traffic alert fires or resolves, one JSON message is
produced to the alerts topic, keyed by the monitored log path so all
transitions of one log land on the same partition, in order.
"""

import json

from confluent_kafka import Producer
from confluent_kafka.admin import AdminClient, NewTopic


class AlertSink:

    def __init__(self, producer, topic: str, source: str):
        self.producer = producer
        self.topic = topic
        self.source = source
        self.published = 0

    def publish(self, alert: dict) -> None:
        message = dict(alert, source=self.source)
        self.producer.produce(
            self.topic,
            key=self.source.encode(),
            value=json.dumps(message).encode(),
        )
        self.producer.poll(0)
        self.published += 1

    def flush(self) -> None:
        self.producer.flush()


def ensure_topic(bootstrap_servers, topic, num_partitions=1, replication_factor=1):
    """Create the alerts topic if it doesn't already exist."""
    admin = AdminClient({"bootstrap.servers": bootstrap_servers})
    fs = admin.create_topics([NewTopic(
        topic, num_partitions=num_partitions, replication_factor=replication_factor,
    )])
    for t, f in fs.items():
        try:
            f.result()
            print(f"Created topic '{t}'")
        except Exception as e:
            if "TOPIC_ALREADY_EXISTS" in str(e):
                print(f"Topic '{t}' already exists")
            else:
                raise


def create_sink(bootstrap_servers: str, topic: str, source: str) -> AlertSink:
    ensure_topic(bootstrap_servers, topic)
    producer = Producer({
        "bootstrap.servers": bootstrap_servers,
        "client.id": "access-log-monitor",
    })
    return AlertSink(producer, topic, source)
