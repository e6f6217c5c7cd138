"""
Sunset Bot API package.

Read-only HTTP view of the bot's subscriptions plus a one-shot sunset
query; runs as a separate uvicorn process (see run_all.py).
"""
