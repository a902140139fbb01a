"""MongoDB driver for seeding collections.

Truncation drops whole collections; insertion is one insert_many per
collection.

Installation:
    pip install pymongo

Example:
    >>> from pymongo import AsyncMongoClient
    >>> from dbfixtures.drivers import MongoDriver
    >>> driver = MongoDriver(AsyncMongoClient("mongodb://localhost:27017"), "test")
    >>> await driver.truncate(["users"])
    >>> await driver.insert_fixtures("users", [{"name": "Ada"}])
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from bson.codec_options import CodecOptions
from pymongo import AsyncMongoClient, WriteConcern

from dbfixtures.ports.driver import BaseDriver

logger = logging.getLogger(__name__)


class MongoDriver(BaseDriver[Mapping[str, Any]]):
    """Driver seeding MongoDB collections with documents."""

    driver_name = "mongodb"

    def __init__(
        self,
        client: AsyncMongoClient,
        database: str,
        codec_options: CodecOptions | None = None,
        write_concern: WriteConcern | None = None,
    ) -> None:
        """Initialize the MongoDB driver.

        Args:
            client: Async MongoDB client. The driver takes ownership and
                closes it in close().
            database: Name of the database holding the collections.
            codec_options: Optional codec options for the database.
            write_concern: Optional write concern for the database.
        """
        self._client = client
        self._db = client.get_database(
            database,
            codec_options=codec_options,
            write_concern=write_concern,
        )

    async def truncate(self, names: Sequence[str]) -> None:
        """Drop every given collection concurrently.

        Every drop runs to completion; the first failure in name order is
        then raised unchanged.
        """
        results = await asyncio.gather(
            *(self._db.drop_collection(name) for name in names),
            return_exceptions=True,
        )
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            raise errors[0]
        logger.debug(f"Dropped {len(names)} MongoDB collection(s)")

    async def insert_fixtures(
        self, name: str, fixtures: Sequence[Mapping[str, Any]]
    ) -> None:
        """Insert the documents into the collection in one batch."""
        if not fixtures:
            return

        # insert_many sets _id on the documents it receives.
        documents = [dict(fixture) for fixture in fixtures]
        await self._db.get_collection(name).insert_many(documents)
        logger.debug(f"Inserted {len(documents)} document(s) into MongoDB collection '{name}'")

    async def close(self) -> None:
        await self._client.close()
        logger.info("Closed MongoDB connection")
