from __future__ import annotations

from functools import lru_cache
from typing import Any

from monkay import Monkay


@lru_cache
def get_bullscope_monkay() -> Monkay[None, Any]:
    from bullscope import monkay

    monkay.evaluate_settings(on_conflict="error", ignore_import_errors=False)
    return monkay


class SettingsForward:
    """
    A proxy for the settings object managed by Monkay.

    Attribute reads and writes are forwarded to the underlying settings
    instance, which is loaded on first access. This lets tests and the CLI
    swap `settings.store` at runtime without re-importing modules.
    """

    def __getattribute__(self, name: str) -> Any:
        monkay = get_bullscope_monkay()
        return getattr(monkay.settings, name)

    def __setattr__(self, name: str, value: Any) -> None:
        monkay = get_bullscope_monkay()
        setattr(monkay.settings, name, value)


settings = SettingsForward()
