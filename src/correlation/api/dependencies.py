from __future__ import annotations

from fastapi import Request

from src.correlation.application.callback_receiver import CallbackReceiver


def get_callback_receiver(request: Request) -> CallbackReceiver:
    return request.app.state.callback_receiver
