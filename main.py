import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import aiohttp

from config import Config, ConfigError
from logger import log, use_log_file


async def run_wizard(config: Config) -> Optional[str]:
    """Verify the session, then run the wizard. Returns the new server's handle."""
    from panel_api.client import PanelAPIClient
    from app import PanelWizard

    async with PanelAPIClient(config.panel) as client:
        user = await client.fetch_identity()
        log.info("Session verified for %s", user.get("username") or user.get("email") or "?")
        app = PanelWizard(client, servers_url=config.panel.servers_url)
        try:
            return await app.run_async()
        finally:
            app.wizard.close()


def main(argv=None):
    from panel_api.client import APIError

    parser = argparse.ArgumentParser(
        prog="panel-wizard", description="Create a server on the hosting panel."
    )
    parser.add_argument("--config", type=Path, help="path to config.yaml")
    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if config.logging.file_path is not None:
        use_log_file(str(config.logging.file_path))

    if not config.panel.token:
        print("ERROR: Not logged in. Set panel.token or PANEL_TOKEN.", file=sys.stderr)
        sys.exit(1)

    try:
        handle = asyncio.run(run_wizard(config))
    except (APIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        log.error("Session check failed: %s", e)
        print(f"ERROR: Could not verify panel session: {e}", file=sys.stderr)
        sys.exit(1)

    if handle:
        print(f"Server {handle} created. Manage it at {config.panel.servers_url}")
    sys.exit(0)


if __name__ == "__main__":
    main()
