"""Payload builders and a recording Feishu transport for relay tests."""

import json
from typing import Any, Dict, List, Optional

import httpx

from src.relay.feishu.client import FeishuClient

FEISHU_URL = "https://open.feishu.cn/open-apis/bot/v2/hook/test-hook"


def make_payload(
    action: str = "completed",
    conclusion: str = "success",
    workflow_name: str = "CI",
    job_name: str = "build",
    branch: str = "main",
    html_url: str = "https://github.com/octo/widgets/actions/runs/1/job/2",
    started_at: Any = "2024-01-01T00:00:00Z",
    completed_at: Any = "2024-01-01T00:02:05Z",
    repository: str = "octo/widgets",
) -> Dict[str, Any]:
    return {
        "action": action,
        "workflow_job": {
            "id": 2,
            "run_id": 1,
            "conclusion": conclusion,
            "workflow_name": workflow_name,
            "name": job_name,
            "head_branch": branch,
            "html_url": html_url,
            "started_at": started_at,
            "completed_at": completed_at,
            "labels": ["ubuntu-latest"],
        },
        "repository": {"id": 99, "full_name": repository, "private": False},
        "sender": {"login": "octocat"},
    }


def encode(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload).encode("utf-8")


class FeishuRecorder:
    """httpx transport handler that records requests and replies canned."""

    def __init__(
        self,
        status_code: int = 200,
        body: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.body = body if body is not None else {"code": 0, "msg": "success"}
        self.error = error
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def messages(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


def make_client(
    recorder: FeishuRecorder, url: Optional[str] = FEISHU_URL
) -> FeishuClient:
    return FeishuClient(
        webhook_url=url,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
    )

