#!/usr/bin/env python3
"""Standalone relay app — run nexus-relay as a local chat server.

    cd samples/chat
    python app.py

Requires GEMINI_API_KEY, OPENAI_API_KEY and DEEPSEEK_API_KEY in your
environment or in a .env file. Starts on http://127.0.0.1:3000.

Environment variables:
    PORT            — Server port (default: 3000)
    HTTPS           — Set to 1 for HTTPS with a self-signed certificate
    BACKEND_TIMEOUT — Seconds to wait for a backend reply (optional)
"""
from nexus_relay.standalone import main

if __name__ == "__main__":
    main()
