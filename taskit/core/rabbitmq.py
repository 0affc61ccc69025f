import json
import logging
from typing import Dict, Any
import pika
import pika.exceptions

logger = logging.getLogger(__name__)


class RabbitMQPublisher:
    """RabbitMQ publisher for account events"""

    def __init__(self, url: str, exchange: str = "events"):
        self.url = url
        self.exchange = exchange
        self.connection = None
        self.channel = None

    def connect(self) -> bool:
        """Establish connection to RabbitMQ"""
        try:
            self.connection = pika.BlockingConnection(pika.URLParameters(self.url))
            self.channel = self.connection.channel()

            # Declare exchange
            self.channel.exchange_declare(
                exchange=self.exchange,
                exchange_type='topic',
                durable=True
            )

            logger.info(f"Connected to RabbitMQ exchange '{self.exchange}'")
            return True

        except pika.exceptions.AMQPConnectionError as e:
            logger.warning(f"Could not connect to RabbitMQ: {e}")
            return False

    def publish_event(self, routing_key: str, data: Dict[str, Any]) -> bool:
        """Publish event to RabbitMQ"""
        if not self.connection or self.connection.is_closed:
            if not self.connect():
                logger.warning(f"Failed to publish {routing_key} event - no connection")
                return False

        try:
            message = {
                'event': routing_key,
                'data': data
            }

            self.channel.basic_publish(
                exchange=self.exchange,
                routing_key=routing_key,
                body=json.dumps(message),
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent
                    content_type='application/json'
                )
            )

            logger.info(f"Published {routing_key} event to RabbitMQ")
            return True

        except pika.exceptions.AMQPError as e:
            logger.error(f"Error publishing event: {e}")
            return False

    def close(self):
        """Close connection"""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info("RabbitMQ connection closed")
        except pika.exceptions.AMQPError as e:
            logger.error(f"Error closing connection: {e}")
