# main.py
import atexit
import faulthandler
import logging
import socket
import sys
from typing import List, Tuple

import app_instance
import config
import console
from errors import AudioInitError, NoLiveSessionError, ProviderLoadError
from provider import load_provider_factory
from session_controller import SessionController

logger = logging.getLogger("F1Dash.Main")


def setup_logging():
    log_formatter = logging.Formatter(config.LOG_FORMAT_DEFAULT)
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # The console view owns the terminal, so records only reach stderr at WARNING
    if config.LOG_FILE:
        handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8")
        root_logger.setLevel(config.LOG_LEVEL)
    else:
        handler = logging.StreamHandler(sys.stderr)
        root_logger.setLevel(logging.WARNING)
    handler.setFormatter(log_formatter)
    root_logger.addHandler(handler)

    logging.getLogger("F1Dash").propagate = True

    werkzeug_logger = logging.getLogger("werkzeug")
    werkzeug_logger.setLevel(logging.ERROR)
    if werkzeug_logger.hasHandlers():
        werkzeug_logger.handlers.clear()


def get_server_addresses() -> List[Tuple[str, int]]:
    """Configured host, or localhost plus every non-loopback IPv4 address of this machine."""
    if config.WEB_HOST:
        return [(config.WEB_HOST, config.WEB_PORT)]

    hosts = ["localhost"]
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except socket.gaierror as e:
        logger.warning(f"Could not resolve local addresses: {e}")
        infos = []
    for info in infos:
        address = info[4][0]
        if not address.startswith("127.") and address not in hosts:
            hosts.append(address)
    return [(host, config.WEB_PORT) for host in hosts]


def main() -> int:
    faulthandler.enable()
    setup_logging()

    if not config.PROVIDER_FACTORY:
        print("No session provider configured, set F1DASH_PROVIDER to 'module:callable'.", file=sys.stderr)
        return 2
    try:
        factory = load_provider_factory(config.PROVIDER_FACTORY)
    except ProviderLoadError as e:
        logger.error(f"Provider could not be loaded: {e}")
        print(e, file=sys.stderr)
        return 2

    try:
        provider = factory(live=True)
    except NoLiveSessionError:
        provider = None
    if provider is None:
        print(config.TEXT_NO_LIVE_SESSION)
        return 1

    controller = SessionController(live_delay=config.LIVE_DELAY_SECONDS)
    addresses = get_server_addresses()
    servers = app_instance.start_web_servers(app_instance.create_web_app(controller), addresses)
    atexit.register(app_instance.stop_web_servers, servers)
    for host, port in addresses:
        print(f"Web mirror: http://{host}:{port}/")

    try:
        controller.enter(provider, is_live=True)
    except AudioInitError as e:
        print(e, file=sys.stderr)
        return 1
    console.run_console(controller)
    logger.info("Session closed, exiting.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
