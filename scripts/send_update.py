"""Send a synthetic Telegram update to a running webhook."""

import sys
import time
from typing import Any

import click
import requests
from requests.exceptions import RequestException


def build_update(  # noqa: PLR0913
    user_id: int,
    chat_id: int,
    text: str | None,
    inline: str | None,
    callback: str | None,
    username: str,
) -> dict[str, Any]:
    """Build an update carrying exactly one interaction."""
    sender = {"id": user_id, "is_bot": False, "first_name": username, "username": username}
    update: dict[str, Any] = {"update_id": int(time.time())}
    if inline is not None:
        update["inline_query"] = {"id": str(update["update_id"]), "from": sender, "query": inline, "offset": ""}
    elif callback is not None:
        update["callback_query"] = {
            "id": str(update["update_id"]),
            "from": sender,
            "data": callback,
            "chat_instance": str(chat_id),
            "message": {"message_id": 1, "date": int(time.time()), "chat": {"id": chat_id, "type": "private"}},
        }
    else:
        update["message"] = {
            "message_id": update["update_id"],
            "date": int(time.time()),
            "from": sender,
            "chat": {"id": chat_id, "type": "private"},
            "text": text or "/start",
        }
    return update


@click.command()
@click.option("--url", default="http://0.0.0.0:8001", help="Base URL of the API")
@click.option("--user-id", type=int, default=1, help="Telegram id of the sender")
@click.option("--chat-id", type=int, default=None, help="Chat id (defaults to the user id)")
@click.option("--username", default="tester", help="Username of the sender")
@click.option("--text", default=None, help="Message text, e.g. '/start' or a series title")
@click.option("--inline", default=None, help="Inline query text")
@click.option("--callback", default=None, help="Callback data, e.g. 'sub 42'")
@click.option("--secret-token", default=None, help="Webhook secret token")
@click.option("--timeout", default=30, help="Request timeout in seconds")
def main(  # noqa: PLR0913
    url: str,
    user_id: int,
    chat_id: int | None,
    username: str,
    text: str | None,
    inline: str | None,
    callback: str | None,
    secret_token: str | None,
    timeout: int,
) -> None:
    """Post one update to the webhook endpoint."""
    if sum(option is not None for option in (text, inline, callback)) > 1:
        raise click.UsageError("Use only one of --text, --inline and --callback.")

    endpoint = f"{url.rstrip('/')}/telegram/webhook"
    update = build_update(user_id, chat_id or user_id, text, inline, callback, username)
    headers = {"X-Telegram-Bot-Api-Secret-Token": secret_token} if secret_token else {}

    click.echo(f"Calling endpoint: {endpoint}")
    try:
        response = requests.post(endpoint, json=update, headers=headers, timeout=timeout)
        response.raise_for_status()
        click.echo(f"Status Code: {response.status_code}")
        click.echo(f"Response: {response.json()}")
    except RequestException as e:
        click.echo(f"Error calling endpoint: {e}", err=True)
        if hasattr(e, "response") and e.response is not None:
            click.echo(f"Server response: {e.response.text}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
