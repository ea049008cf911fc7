"""
integrations/ - Remote Services
===============================
Thin clients for the services the app talks to: the Tinkoff Invest REST
gateway, the Telegram Bot API and browser Web Push.
"""
