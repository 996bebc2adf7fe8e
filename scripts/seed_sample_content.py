#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class SampleDocument:
    label: str
    delta: dict[str, object]


def build_sample_documents() -> list[SampleDocument]:
    return [
        SampleDocument(
            label="Formatted announcement",
            delta={
                "ops": [
                    {"insert": "Mentor meetup", "attributes": {"bold": True, "size": "24px"}},
                    {"insert": "\n", "attributes": {"header": 1}},
                    {"insert": "Details on the "},
                    {"insert": "forum wiki", "attributes": {"link": "https://example.com/wiki"}},
                    {"insert": ".\n"},
                ]
            },
        ),
        SampleDocument(
            label="Mention reply",
            delta={
                "ops": [
                    {"insert": {"mention-chip": {"uid": "u-100", "nickname": "mentor kim"}}},
                    {"insert": " thanks for the notes!\n"},
                ]
            },
        ),
        SampleDocument(
            label="Hostile formatting",
            delta={
                "ops": [
                    {
                        "insert": "click me",
                        "attributes": {"link": "javascript:alert(1)", "size": "400px", "indent": 99},
                    },
                    {"insert": {"video": "https://example.com/embed"}},
                ]
            },
        ),
    ]


def store_document(client: httpx.Client, base_url: str, sample: SampleDocument) -> tuple[str, str]:
    try:
        response = client.post(
            f"{base_url.rstrip('/')}/api/v1/content/store",
            json={"document": sample.delta},
        )
    except httpx.HTTPError as exc:
        return ("error", f"request_failed: {exc}")

    if response.status_code == 200:
        data = response.json()
        return ("prepared", json.dumps(data["contentRich"], ensure_ascii=False))

    detail = response.text
    try:
        detail = json.dumps(response.json(), indent=2)
    except ValueError:
        pass
    return ("error", f"status={response.status_code} detail={detail}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Send sample editor documents through the content API")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Richtext API base URL (default: http://localhost:8000)",
    )
    args = parser.parse_args()

    samples = build_sample_documents()
    print(f"Preparing {len(samples)} sample documents via {args.base_url}...")

    with httpx.Client(timeout=10) as client:
        for sample in samples:
            outcome, info = store_document(client, args.base_url, sample)
            print(f"- {sample.label}: {outcome} ({info})")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
