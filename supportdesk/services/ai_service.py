import logging
import httpx
from flask import current_app

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful tech support assistant."


def build_messages(issue, logs=""):
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Issue: {issue}\nLogs: {logs}"},
    ]


def generate_solution(issue, logs=""):
    """Ask the chat completions API for a diagnosis.

    Returns:
        the assistant's reply text

    Raises:
        RuntimeError on API errors or a response without a reply
    """
    config = current_app.config
    url = config["OPENAI_BASE_URL"].rstrip("/") + "/chat/completions"
    payload = {
        "model": config["OPENAI_MODEL"],
        "messages": build_messages(issue, logs),
        "max_tokens": config["OPENAI_MAX_TOKENS"],
    }
    headers = {"Authorization": f"Bearer {config['OPENAI_API_KEY']}"}

    try:
        resp = httpx.post(
            url, json=payload, headers=headers, timeout=config["OPENAI_TIMEOUT"]
        )
    except httpx.HTTPError as e:
        raise RuntimeError(f"Completions request failed: {e}") from e

    if resp.status_code >= 400:
        logger.error("Completions API error %s: %s", resp.status_code, resp.text[:500])
        raise RuntimeError(f"Completions API error: HTTP {resp.status_code}")

    try:
        data = resp.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise RuntimeError("Completions API returned no reply") from e

    if not content:
        raise RuntimeError("Completions API returned an empty reply")
    return content
