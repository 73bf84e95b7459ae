import io
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Ensure the repository root is on sys.path so `import s3assistant` works in tests.
ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from s3assistant.clients.s3_client import StorageClient  # noqa: E402
from s3assistant.config import Settings  # noqa: E402
from s3assistant.tools.storage_tools import StorageTools  # noqa: E402

OK_METADATA = {"HTTPStatusCode": 200, "RequestId": "req-1"}


class FakeS3:
    """Records boto3-style calls and returns canned responses (or raises)"""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.responses: Dict[str, Dict[str, Any]] = {}
        self.errors: Dict[str, Exception] = {}

    def _call(self, op: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((op, kwargs))
        if op in self.errors:
            raise self.errors[op]
        return dict(self.responses.get(op, {"ResponseMetadata": OK_METADATA}))

    def create_bucket(self, **kwargs):
        return self._call("create_bucket", kwargs)

    def delete_bucket(self, **kwargs):
        return self._call("delete_bucket", kwargs)

    def list_buckets(self, **kwargs):
        return self._call("list_buckets", kwargs)

    def put_object(self, **kwargs):
        return self._call("put_object", kwargs)

    def get_object(self, **kwargs):
        response = self._call("get_object", kwargs)
        body = response.get("Body")
        if isinstance(body, bytes):
            response["Body"] = io.BytesIO(body)
        return response

    def delete_object(self, **kwargs):
        return self._call("delete_object", kwargs)

    def calls_to(self, op: str) -> List[Dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == op]


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def storage_tools(fake_s3) -> StorageTools:
    return StorageTools(storage=StorageClient(client=fake_s3))


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="sk-test", mysql_mcp_command="node dist/index.js")
