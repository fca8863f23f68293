from abc import ABC, abstractmethod


class EmailSenderPort(ABC):
    @abstractmethod
    def send(self, template_params: dict[str, str]) -> bool:
        """
        Send one templated email. Fire and forget.

        Returns True when the provider accepted the message. Implementations
        must not raise for provider errors; they log and return False.
        """
        raise NotImplementedError
