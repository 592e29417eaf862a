"""Forum API infrastructure providers."""

from dishka import Scope, provide

from threadsync.adapter.forum import HttpForumClient, HttpTransport
from threadsync.config import Settings
from threadsync.domain.service import ForumClient
from threadsync.util.di.base import ProviderBase
from threadsync.util.error import ConfigurationError
from threadsync.util.observability import instrument_httpx


class ForumProvider(ProviderBase):
    """Forum component base."""

    __mock_component__ = "forum"


class ProdForumProvider(ForumProvider):
    """Production forum provider talking HTTP."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_transport(self, settings: Settings) -> HttpTransport:
        """Provide authenticated HTTP transport.

        Raises:
            ConfigurationError: If the API base URL is not an http(s) URL
        """
        if not settings.api.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "API__BASE_URL", f"must be an http(s) URL, got {settings.api.base_url!r}"
            )
        # Trace outbound forum calls
        instrument_httpx()
        return HttpTransport(
            base_url=settings.api.base_url,
            auth_token=settings.api.auth_token,
            timeout=settings.api.timeout_seconds,
        )

    @provide(scope=Scope.APP)
    def get_forum_client(self, transport: HttpTransport) -> ForumClient:
        """Provide HTTP forum client."""
        return HttpForumClient(transport=transport)
