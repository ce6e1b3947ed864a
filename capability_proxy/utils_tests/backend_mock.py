import httpx

TEST_BACKEND_URL = "http://backend.internal:8080"


class RecordingBackend:
    """Stand-in for the orchestration backend, served through httpx.MockTransport."""

    def __init__(self, status_code=200, content=b"{}", headers=None, error=None):
        self.status_code = status_code
        self.content = content
        self.headers = (
            {"content-type": "application/json"} if headers is None else headers
        )
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code, headers=self.headers, content=self.content
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))
