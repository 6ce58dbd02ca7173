from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ConfigDict, Field

from remote_config import ConfigHandle, ConfigServiceError
from remote_config.config import YamlConfigLoader
from remote_config.config.models import ConfigLoadRequest
from remote_config.logging import init_logging


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = "sqlite://"
    pool_size: int = 5


class ShopSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    maintenance: bool = False


async def main() -> None:
    config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path="examples/config.yaml"))
    init_logging(config.logging)
    logger = logging.getLogger("example")

    handle = ConfigHandle.from_settings(ShopSettings, config.client)
    try:
        await handle.load()
    except ConfigServiceError as exc:
        logger.warning("Using default settings. error=%s", exc.message)

    pool_size = await handle.get(lambda c: c.database.pool_size)
    logger.info("Settings ready loaded=%s pool_size=%s", handle.loaded, pool_size)


if __name__ == "__main__":
    asyncio.run(main())
