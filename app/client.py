#!/usr/bin/env python3
"""Command-line client for the social feed.

Keeps the logged-in identity on disk, renders the feed and conversations as
text and mirrors pushed ``newPost``/``receiveMessage`` events into local state.
Sent messages are shown immediately from a local copy; the server never echoes
them back to the sender.

  python -m app.client register alice alice@example.com secret
  python -m app.client login alice@example.com secret
  python -m app.client feed
  python -m app.client post "hello"
  python -m app.client chat 2
"""

import argparse
import asyncio
import json
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import websockets

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_SESSION_FILE = Path.home() / ".social_session.json"


class ClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ClientSession:
    """Authenticated identity held by the client."""

    def __init__(self, user: Optional[Dict[str, Any]] = None, token: Optional[str] = None):
        self.user = user
        self.token = token

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def login(self, user: Dict[str, Any], token: str) -> None:
        self.user = user
        self.token = token

    def logout(self) -> None:
        self.user = None
        self.token = None

    def save(self, path: Path) -> None:
        path.write_text(json.dumps({"user": self.user, "token": self.token}))

    @classmethod
    def load(cls, path: Path) -> "ClientSession":
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError):
            data = None
        if not isinstance(data, dict):
            # unreadable session file means logged out
            path.unlink(missing_ok=True)
            return cls()
        return cls(data.get("user"), data.get("token"))


class DashboardState:
    """Local view of the feed and of the user's messages."""

    def __init__(self, user: Dict[str, Any]):
        self.user = user
        self.posts: List[Dict[str, Any]] = []
        self.messages: List[Dict[str, Any]] = []

    def apply_event(self, event: Dict[str, Any]) -> bool:
        kind = event.get("type")
        data = event.get("data")
        if kind == "newPost" and data:
            self.posts.insert(0, data)
            return True
        if kind == "receiveMessage" and data:
            self.messages.append(data)
            return True
        return False

    def add_optimistic_message(self, receiver: Dict[str, Any], content: str) -> Dict[str, Any]:
        message = {
            "id": int(time.time() * 1000),  # temporary until the next history fetch
            "sender_id": self.user["id"],
            "receiver_id": receiver["id"],
            "content": content,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "sender_name": self.user["username"],
            "receiver_name": receiver.get("username"),
        }
        self.messages.append(message)
        return message

    def conversation_with(self, user_id: int) -> List[Dict[str, Any]]:
        return [
            m for m in self.messages
            if {m["sender_id"], m["receiver_id"]} == {self.user["id"], user_id}
        ]


class SocialClient:
    """HTTP and realtime access to the API for one session.

    ``http`` is anything with requests' ``get``/``post`` call shape, a
    ``requests.Session`` by default.
    """

    def __init__(self, session: ClientSession, base_url: str = DEFAULT_BASE_URL, http=None):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()

    def _request(self, method: str, path: str, expected: int, json_body: Optional[dict] = None):
        kwargs = {"headers": self.session.auth_headers()}
        if json_body is not None:
            kwargs["json"] = json_body
        response = getattr(self.http, method)(f"{self.base_url}{path}", **kwargs)
        if response.status_code != expected:
            try:
                message = response.json().get("error", "Unknown error")
            except ValueError:
                message = "Unknown error"
            raise ClientError(response.status_code, message)
        return response.json()

    def register(self, username: str, email: str, password: str, role: str = "member") -> Dict[str, Any]:
        body = {"username": username, "email": email, "password": password, "role": role}
        data = self._request("post", "/api/auth/register", 201, body)
        self.session.login(data["user"], data["token"])
        return data["user"]

    def login(self, email: str, password: str, role: Optional[str] = None) -> Dict[str, Any]:
        body = {"email": email, "password": password}
        if role:
            body["role"] = role
        data = self._request("post", "/api/auth/login", 200, body)
        self.session.login(data["user"], data["token"])
        return data["user"]

    def fetch_posts(self) -> List[Dict[str, Any]]:
        return self._request("get", "/api/posts", 200)

    def create_post(self, content: str) -> Dict[str, Any]:
        return self._request("post", "/api/posts", 201, {"content": content})

    def fetch_messages(self) -> List[Dict[str, Any]]:
        return self._request("get", f"/api/messages/{self.session.user['id']}", 200)

    def list_users(self) -> List[Dict[str, Any]]:
        return self._request("get", "/api/users", 200)

    def load_dashboard(self) -> DashboardState:
        state = DashboardState(self.session.user)
        state.posts = self.fetch_posts()
        state.messages = self.fetch_messages()
        return state

    @property
    def ws_url(self) -> str:
        return self.base_url.replace("http", "ws", 1) + "/ws"

    async def send_message(self, websocket, state: DashboardState, receiver: Dict[str, Any], content: str) -> Dict[str, Any]:
        """Render locally, then hand the message to the realtime channel. No ack is awaited."""
        message = state.add_optimistic_message(receiver, content)
        await websocket.send(json.dumps({
            "action": "sendMessage",
            "data": {
                "senderId": self.session.user["id"],
                "receiverId": receiver["id"],
                "content": content,
                "senderUsername": self.session.user["username"],
            },
        }))
        return message

    async def join(self, websocket) -> None:
        await websocket.send(json.dumps({"action": "join", "data": self.session.user["id"]}))

    async def listen(self, websocket, state: DashboardState, on_event=None) -> None:
        async for raw in websocket:
            event = json.loads(raw)
            if state.apply_event(event) and on_event is not None:
                on_event(event)


def render_login(session: ClientSession) -> str:
    if session.is_authenticated:
        return f"Logged in as {session.user['username']} ({session.user['role']})"
    return "Not logged in. Use `register` or `login`."


def render_post(post: Dict[str, Any]) -> str:
    return f"[{post['created_at']}] {post['author_name']}: {post['content']}"


def render_message(message: Dict[str, Any]) -> str:
    return f"[{message['created_at']}] {message['sender_name']} -> {message.get('receiver_name') or message['receiver_id']}: {message['content']}"


def render_dashboard(state: DashboardState) -> str:
    lines = [f"== {state.user['username']} ==", "", "Posts:"]
    if state.posts:
        lines.extend(render_post(p) for p in state.posts)
    else:
        lines.append("  (no posts yet)")
    lines.extend(["", "Messages:"])
    if state.messages:
        lines.extend(render_message(m) for m in state.messages)
    else:
        lines.append("  (no messages)")
    return "\n".join(lines)


async def _chat(client: SocialClient, state: DashboardState, receiver: Dict[str, Any]) -> None:
    loop = asyncio.get_running_loop()
    async with websockets.connect(client.ws_url) as websocket:
        await client.join(websocket)

        def show(event):
            data = event["data"]
            print(render_post(data) if event["type"] == "newPost" else render_message(data))

        receiver_task = asyncio.create_task(client.listen(websocket, state, show))
        try:
            while True:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line:
                    break
                content = line.rstrip("\n")
                if content.strip():
                    await client.send_message(websocket, state, receiver, content)
        finally:
            receiver_task.cancel()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Social feed client")
    parser.add_argument("--url", default=DEFAULT_BASE_URL, help="API base URL")
    parser.add_argument("--session-file", type=Path, default=DEFAULT_SESSION_FILE)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register")
    p.add_argument("username")
    p.add_argument("email")
    p.add_argument("password")
    p.add_argument("--role", choices=["member", "admin"], default="member")

    p = sub.add_parser("login")
    p.add_argument("email")
    p.add_argument("password")
    p.add_argument("--role", choices=["member", "admin"])

    sub.add_parser("logout")
    sub.add_parser("whoami")
    sub.add_parser("feed")

    p = sub.add_parser("post")
    p.add_argument("content")

    p = sub.add_parser("chat")
    p.add_argument("user_id", type=int)

    args = parser.parse_args(argv)
    session = ClientSession.load(args.session_file)
    client = SocialClient(session, args.url)

    try:
        if args.command == "register":
            client.register(args.username, args.email, args.password, args.role)
            session.save(args.session_file)
            print(render_login(session))
        elif args.command == "login":
            client.login(args.email, args.password, args.role)
            session.save(args.session_file)
            print(render_login(session))
        elif args.command == "logout":
            session.logout()
            args.session_file.unlink(missing_ok=True)
            print(render_login(session))
        elif args.command == "whoami":
            print(render_login(session))
        elif not session.is_authenticated:
            print(render_login(session), file=sys.stderr)
            return 1
        elif args.command == "feed":
            print(render_dashboard(client.load_dashboard()))
        elif args.command == "post":
            print(render_post(client.create_post(args.content)))
        elif args.command == "chat":
            receiver = next((u for u in client.list_users() if u["id"] == args.user_id), None)
            if receiver is None:
                print(f"No user with id {args.user_id}", file=sys.stderr)
                return 1
            state = client.load_dashboard()
            for message in state.conversation_with(receiver["id"]):
                print(render_message(message))
            asyncio.run(_chat(client, state, receiver))
    except ClientError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
