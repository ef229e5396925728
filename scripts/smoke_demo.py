from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

DEMO_CLIENT = "smoke-client"


def fetch(url: str) -> tuple[int, bytes]:
    req = urllib.request.Request(url)
    with urllib.request.urlopen(req, timeout=10) as resp:
        return resp.status, resp.read()


def post_json(url: str, payload: dict[str, Any]) -> dict[str, Any]:
    req = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=10) as resp:
        return json.loads(resp.read().decode("utf-8"))


def wait_for(url: str, timeout: int) -> bytes:
    deadline = time.time() + timeout
    last_error: Exception | None = None
    while time.time() < deadline:
        try:
            status, body = fetch(url)
            if status == 200:
                return body
        except (urllib.error.URLError, OSError) as exc:
            last_error = exc
        time.sleep(1)
    raise RuntimeError(f"Timed out waiting for {url}: {last_error}")


def command(fsm_name: str, name: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "clientId": DEMO_CLIENT,
        "command": {
            "fsm": fsm_name,
            "command": name,
            "payload": json.dumps(payload) if payload is not None else "",
        },
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running viewer.")
    parser.add_argument("--viewer", default="http://localhost:8080")
    parser.add_argument("--machine", type=Path, default=Path("data/machines/door.json"))
    parser.add_argument("--timeout", type=int, default=60)
    args = parser.parse_args()

    viewer_base = args.viewer.rstrip("/")
    machine = json.loads(args.machine.read_text(encoding="utf-8"))
    fsm_name = machine.get("name") or args.machine.stem

    wait_for(f"{viewer_base}/health", args.timeout)
    result = post_json(f"{viewer_base}/api/commands", command(fsm_name, "set-fsm", machine))
    if [item.get("command") for item in result.get("follow_ups", [])] != [
        "received-fsm",
        "get-states",
    ]:
        raise RuntimeError("set-fsm did not request the current states")

    states = machine.get("states", [])
    initial = next(item for item in states if item.get("isInitial"))
    target = next((item for item in states if not item.get("isInitial")), initial)
    change = {
        "fsm": fsm_name,
        "oldStateName": initial.get("name", ""),
        "oldStateId": initial.get("id", ""),
        "newStateName": target.get("name", ""),
        "newStateId": target.get("id", ""),
    }
    result = post_json(f"{viewer_base}/api/commands", command(fsm_name, "update-state", change))
    if target.get("id") not in result.get("machine", {}).get("highlighted", []):
        raise RuntimeError("State change was not highlighted")

    svg_body = wait_for(f"{viewer_base}/api/machines/{DEMO_CLIENT}/{fsm_name}/svg", args.timeout)
    if b"<svg" not in svg_body:
        raise RuntimeError("Diagram endpoint did not return SVG")

    post_json(f"{viewer_base}/api/commands", command(fsm_name, "remove-client"))
    print("Smoke test passed.")


if __name__ == "__main__":
    main()
