"""Backend drivers implementing the Driver port.

Available Drivers:
    - RedisDriver: Redis keys of any type (string, list, set, hash, stream)
    - MongoDriver: MongoDB collections
    - KafkaDriver: Kafka topics
"""

from __future__ import annotations

from dbfixtures.drivers.kafka_driver import KafkaDriver, KafkaMessage
from dbfixtures.drivers.mongodb_driver import MongoDriver
from dbfixtures.drivers.redis_driver import KeyType, RedisDriver

__all__ = [
    "KafkaDriver",
    "KafkaMessage",
    "KeyType",
    "MongoDriver",
    "RedisDriver",
]
