"""
Catalog context from request headers.
"""
from typing import Optional

from internal.config.settings import Settings
from internal.domain.errors import InvalidFilterValueError


class HeaderContextResolver:
    """
    Answers the storefront scope from ``X-Channel``, ``X-Locale`` and
    ``X-Customer-Group``, falling back to the configured defaults.
    """

    def __init__(
        self,
        settings: Settings,
        channel: Optional[str] = None,
        locale: Optional[str] = None,
        customer_group: Optional[str] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            settings: Application settings holding the defaults.
            channel: ``X-Channel`` header value.
            locale: ``X-Locale`` header value.
            customer_group: ``X-Customer-Group`` header value.
        """
        self._settings = settings
        self._channel = channel
        self._locale = locale
        self._customer_group = customer_group

    def channel(self) -> str:
        return (self._channel or "").strip() or self._settings.default_channel

    def locale(self) -> str:
        return (self._locale or "").strip() or self._settings.default_locale

    def customer_group_id(self) -> int:
        """
        Raises:
            InvalidFilterValueError: If the header is not a positive integer.
        """
        raw = (self._customer_group or "").strip()
        if not raw:
            return self._settings.default_customer_group_id
        if not raw.isdigit() or int(raw) <= 0:
            raise InvalidFilterValueError("X-Customer-Group", raw, "not a customer group id")
        return int(raw)
