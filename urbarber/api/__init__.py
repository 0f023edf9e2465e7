from fastapi import FastAPI

from urbarber.api.app import create_app
from urbarber.config import AppConfig
from urbarber.notifications import NotificationDispatcher, build_notifier
from urbarber.scheduling import BookingScheduler
from urbarber.store import build_store


def build_application(config: AppConfig) -> FastAPI:
    """Wire store, notifier and scheduler from configuration and return the app."""
    store = build_store(config)
    dispatcher = NotificationDispatcher(build_notifier(config))
    scheduler = BookingScheduler.from_config(config, store, notifications=dispatcher)
    return create_app(config, scheduler, dispatcher)


__all__ = ["create_app", "build_application"]
