# app_instance.py
"""
Flask application serving the HTML mirror of the console view.

``/`` returns a static page that fetches ``/data`` every second and swaps
it into a ``<pre>`` block. ``/data`` returns whatever the last console
render pass cached; polling never triggers a render.
"""
import logging
import threading
from typing import Iterable, List, Tuple

import flask
from werkzeug.serving import make_server

import config

logger = logging.getLogger("F1Dash.Web")

HTML_SHELL = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ background-color: #000000; color: #FFFFFF; }}
pre {{ font-family: monospace; }}
</style>
</head>
<body>
<pre id="display"></pre>
<script>
function refresh() {{
    fetch("/data")
        .then(function (response) {{ return response.text(); }})
        .then(function (text) {{ document.getElementById("display").innerHTML = text; }});
}}
refresh();
setInterval(refresh, {refresh_ms});
</script>
</body>
</html>
"""


def create_web_app(controller) -> flask.Flask:
    flask_server = flask.Flask(__name__)
    shell = HTML_SHELL.format(title=config.APP_TITLE, refresh_ms=config.WEB_MIRROR_REFRESH_MS)

    @flask_server.route("/")
    def index():
        return flask.Response(shell, mimetype="text/html")

    @flask_server.route("/data")
    def data():
        return flask.Response(controller.html(), mimetype="text/html")

    return flask_server


def start_web_servers(flask_server: flask.Flask, addresses: Iterable[Tuple[str, int]]) -> List:
    """Serve ``flask_server`` on every address, one daemon thread each."""
    servers = []
    for host, port in addresses:
        try:
            server = make_server(host, port, flask_server, threaded=True)
        except OSError as e:
            logger.error(f"Could not listen on {host}:{port}: {e}")
            continue
        thread = threading.Thread(target=server.serve_forever, name=f"WebMirror_{host}:{port}", daemon=True)
        thread.start()
        logger.info(f"Web mirror listening on http://{host}:{port}/")
        servers.append(server)
    return servers


def stop_web_servers(servers) -> None:
    for server in servers:
        server.shutdown()
