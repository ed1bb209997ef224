from abc import ABC, abstractmethod

from core.models import DeliveryOutcome, PushMessage


class Notifier(ABC):
    # Largest token list a single send() accepts; None means unbounded.
    max_batch_size: int | None = None

    @abstractmethod
    def send(self, tokens: list[str], message: PushMessage) -> list[DeliveryOutcome]:
        """Attempt delivery of ``message`` to every token, one outcome per token.

        Per-token rejections are reported as outcomes. Raising means no delivery
        was attempted for any token in the call.
        """


def get_notifier() -> Notifier:
    from core.config import get_config

    config = get_config()

    from core.notify.expo_notifier import ExpoNotifier

    return ExpoNotifier(
        push_url=config.expo_push_url,
        access_token=config.expo_access_token,
        batch_size=config.push_batch_size,
    )
