# backend/core/dependencies.py
# 앱 상태(app.state)에 붙은 공유 객체 주입

from fastapi import Request

from config import Settings
from storage.transactions import TransactionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> TransactionStore:
    return request.app.state.store


def get_webhook_log(request: Request):
    return request.app.state.webhook_log


def get_forwarder(request: Request):
    return request.app.state.forwarder


def get_match_engine(request: Request):
    return request.app.state.match_engine


def get_bank_accounts(request: Request):
    return request.app.state.bank_accounts
