from accounts_api.models.account import Account

__all__ = ["Account"]
