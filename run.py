#!/usr/bin/env python3
"""Convenience runner for the Terminus activities web server.

Usage:
    python run.py [--host HOST] [--port PORT]
"""
from terminus_activities.main import main

if __name__ == "__main__":
    main()
