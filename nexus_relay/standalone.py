"""Standalone relay server — run nexus-relay without any host app.

Usage::

    cd samples/chat
    python app.py

    # Or via script entry point from anywhere:
    nexus-relay

    # Custom port / HTTPS:
    PORT=9000 nexus-relay
    HTTPS=1 nexus-relay

Environment variables:
    GEMINI_API_KEY, OPENAI_API_KEY, DEEPSEEK_API_KEY — required backend keys
    HOST            — Bind address (default: 127.0.0.1)
    PORT            — Server port (default: 3000, 8443 with HTTPS)
    HTTPS           — Enable HTTPS with self-signed cert (default: 0)
    SSL_CERTFILE    — Path to TLS certificate (auto-generated if missing)
    SSL_KEYFILE     — Path to TLS private key (auto-generated if missing)
    BROADCAST_CAPACITY — Lines buffered per client before the oldest are dropped
    BACKEND_TIMEOUT — Seconds to wait for a backend reply (default: no limit)
    LAG_NOTICE      — Tell clients how many lines they missed (default: 0)

Loads .env from the current working directory or any parent directory.
"""

import ipaddress
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from nexus_relay.backend_manager import BackendManager
from nexus_relay.config import ConfigurationError, RelayConfig

logger = logging.getLogger(__name__)


# ── Self-signed certificate generation ───────────────────────────

def _ensure_self_signed_cert(cert_path: Path, key_path: Path) -> None:
    """Generate a self-signed TLS certificate if files don't exist."""
    if cert_path.exists() and key_path.exists():
        return

    from cryptography import x509
    from cryptography.x509.oid import NameOID
    from cryptography.hazmat.primitives import hashes, serialization
    from cryptography.hazmat.primitives.asymmetric import rsa
    import datetime

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, "localhost"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "nexus-relay dev"),
    ])

    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=365))
        .add_extension(
            x509.SubjectAlternativeName([
                x509.DNSName("localhost"),
                x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
            ]),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )

    key_path.parent.mkdir(parents=True, exist_ok=True)
    cert_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ))
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    logger.info(f"Generated self-signed certificate: {cert_path}")


# ── Chat page ────────────────────────────────────────────────────

INDEX_HTML = """<!doctype html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>NexusAI</title>
    <style>
        :root { --bg: #f0f2f5; --card: #fff; --border: #e0e0e0; --primary: #007bff; }
        body { font: 16px/1.4 system-ui, sans-serif; margin: 0; padding: 2rem;
               display: flex; flex-direction: column; align-items: center; background: var(--bg); color: #333; }
        #card { width: 100%; max-width: 720px; background: var(--card); border-radius: 12px;
                box-shadow: 0 4px 12px rgba(0, 0, 0, 0.1); padding: 1.5rem; }
        #log { height: 60vh; overflow-y: auto; border: 1px solid var(--border); border-radius: 8px;
               padding: 0.75rem; margin-bottom: 1rem; white-space: pre-wrap; }
        #log div { margin-bottom: 0.5rem; }
        form { display: flex; gap: 0.5rem; }
        #msg { flex: 1; padding: 0.6rem; border: 1px solid var(--border); border-radius: 8px; }
        select, button { padding: 0.6rem; border-radius: 8px; border: 1px solid var(--border); }
        button { background: var(--primary); color: #fff; border: none; cursor: pointer; }
    </style>
</head>
<body>
    <div id="card">
        <h1>NexusAI</h1>
        <div id="log"></div>
        <form id="form">
            <select id="model">
                <option value="gemini">Gemini</option>
                <option value="openai">OpenAI</option>
                <option value="deepseek">DeepSeek</option>
            </select>
            <input id="msg" autocomplete="off" placeholder="Type a message…">
            <button type="submit">Send</button>
        </form>
    </div>
    <script>
        const log = document.getElementById("log");
        const proto = location.protocol === "https:" ? "wss" : "ws";
        const ws = new WebSocket(`${proto}://${location.host}{ws_path}`);
        ws.onmessage = (ev) => {
            const line = document.createElement("div");
            line.textContent = ev.data;
            log.appendChild(line);
            log.scrollTop = log.scrollHeight;
        };
        ws.onclose = () => {
            const line = document.createElement("div");
            line.textContent = "Connection closed.";
            log.appendChild(line);
        };
        document.getElementById("form").addEventListener("submit", (ev) => {
            ev.preventDefault();
            const input = document.getElementById("msg");
            const text = input.value.trim();
            if (!text || ws.readyState !== WebSocket.OPEN) return;
            ws.send(JSON.stringify({ model: document.getElementById("model").value, text }));
            input.value = "";
        });
    </script>
</body>
</html>"""


# ── FastAPI app factory ──────────────────────────────────────────

def create_app(
    config: Optional[RelayConfig] = None,
    backends: Optional[BackendManager] = None,
):
    """Create the FastAPI application.

    The broadcast medium is created here, exactly once per application, before
    the server accepts any connection, and is closed when the app shuts down.

    :param config: Relay configuration. Read from the environment (after loading
        .env) when omitted, so a missing API key fails here, at startup.
    :param backends: Backend manager, built from ``config.credentials`` when omitted
    :raises ConfigurationError: If the environment lacks a required setting
    """
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    from fastapi import FastAPI
    from fastapi.responses import HTMLResponse

    from nexus_relay.api import RelayHub
    from nexus_relay.broadcast import BroadcastMedium
    from nexus_relay.server import WS_PATH, build_ws_router

    if config is None:
        config = RelayConfig.from_env()
    if backends is None:
        backends = BackendManager(config.credentials)

    medium = BroadcastMedium(capacity=config.broadcast_capacity)
    hub = RelayHub(
        medium,
        backends,
        backend_timeout=config.backend_timeout,
        lag_notice=config.lag_notice,
    )

    @asynccontextmanager
    async def lifespan(_a):
        yield
        hub.shutdown()

    _app = FastAPI(title="nexus-relay", docs_url=None, redoc_url=None, lifespan=lifespan)
    _app.state.hub = hub
    _app.include_router(build_ws_router(hub))

    index_html = INDEX_HTML.replace("{ws_path}", WS_PATH)

    @_app.get("/", response_class=HTMLResponse)
    async def index():
        return HTMLResponse(index_html)

    return _app


# ── Entry point ──────────────────────────────────────────────────

def main():
    """Load .env, resolve configuration, and start the server."""
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = RelayConfig.from_env()
    except ConfigurationError as e:
        logger.critical(f"Cannot start relay: {e}")
        sys.exit(1)

    ssl_kwargs = {}
    if config.https:
        cert_path = Path(config.ssl_certfile)
        key_path = Path(config.ssl_keyfile)
        _ensure_self_signed_cert(cert_path, key_path)
        ssl_kwargs = {"ssl_certfile": str(cert_path), "ssl_keyfile": str(key_path)}
        proto = "https"
    else:
        proto = "http"

    ws_proto = "wss" if config.https else "ws"
    print(f"\n  📡 nexus-relay → {proto}://{config.host}:{config.port}  (WS: {ws_proto}://{config.host}:{config.port}/ws)\n")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        **ssl_kwargs,
    )


if __name__ == "__main__":
    main()
