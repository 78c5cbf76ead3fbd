"""
Pod demo showing the public API end to end.

This demonstrates:
1. Singleton and transient providers
2. Overrides for testing
3. Custom scopes and scope clearing
4. Disposal
"""

import uuid
from typing import Any, Dict, Protocol

from pypod import TRANSIENT, Pod, Provider, custom_scope


# ============================================================================
# 1. Services
# ============================================================================

class HttpClient(Protocol):
    def get(self, url: str) -> str: ...


class HttpClientImpl:
    def __init__(self):
        self._disposed = False

    def get(self, url: str) -> str:
        if self._disposed:
            raise RuntimeError("HttpClient has been disposed")
        return f"Response from {url}"

    def dispose(self) -> None:
        self._disposed = True
        print("HttpClient disposed")


class MockHttpClient:
    def get(self, url: str) -> str:
        return f"Mock response from {url}"


class ApiService:
    def __init__(self, client: HttpClient):
        self.client = client

    def fetch_user(self, user_id: int) -> str:
        return self.client.get(f"/api/users/{user_id}")


# ============================================================================
# 2. Providers (module-level constants)
# ============================================================================

http_client = Provider(lambda pod: HttpClientImpl(), debug_name="http_client")

api_service = Provider(
    lambda pod: ApiService(client=pod.resolve(http_client)),
    debug_name="api_service",
)

request_id = Provider(lambda pod: uuid.uuid4().hex, scope=TRANSIENT)

session_scope = custom_scope("session")

session_data: Provider[Dict[str, Any]] = Provider(lambda pod: {}, scope=session_scope)


def main() -> None:
    print("=== Basic Usage ===\n")

    pod = Pod()
    api = pod.resolve(api_service)
    print(f"User data: {api.fetch_user(1)}")
    print(f"Same instance: {api is pod.resolve(api_service)}")

    print("\n=== Transient Scope ===\n")

    first, second = pod.resolve(request_id), pod.resolve(request_id)
    print(f"Request IDs: {first}, {second}")
    print(f"Different instances: {first != second}")

    print("\n=== Testing with Overrides ===\n")

    with Pod() as test_pod:
        test_pod.override_provider(http_client, lambda _: MockHttpClient())
        print(f"Mock response: {test_pod.resolve(api_service).fetch_user(1)}")

    print("\n=== Custom Scopes ===\n")

    with Pod() as scoped_pod:
        scoped_pod.resolve(session_data)["user_id"] = 42
        print(f"Session data preserved: {scoped_pod.resolve(session_data)['user_id']}")

        scoped_pod.clear_scope(session_scope)
        print(f"After clear, user_id: {scoped_pod.resolve(session_data).get('user_id')}")

    print("\n=== Disposal ===\n")

    pod.dispose()
    print("Pod disposed - all cached instances cleaned up")


if __name__ == "__main__":
    main()
