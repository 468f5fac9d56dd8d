#!/usr/bin/env python3
"""
Weather Radar API - run locally

Usage:
    PORT=3001 python main.py
    # then GET http://localhost:3001/api/radar/latest
"""
from radar.server import run

if __name__ == "__main__":
    run()
