import json

from mentionhook.channels.base import InboundMessage
from mentionhook.dispatch.models import (
    ActionConfig,
    ActionKind,
    BotMention,
    ChatReply,
    MessageContext,
    OutboundRequest,
)
from mentionhook.dispatch.payloads import ActionPayloadBuilder

MENTION = BotMention(raw_match="ai_qwen", bot_id="ai_qwen")


def _context(**overrides) -> MessageContext:
    fields = {
        "text": "@ai_qwen the build is broken\n  see logs",
        "id": "msg-1",
        "sender_id": "u1",
        "sender_username": "alice",
        "room_id": "r1",
        "room_name": "dev",
        "room_topic": "backend",
    }
    fields.update(overrides)
    return MessageContext.from_message(InboundMessage(**fields))


def _issue_config(**overrides) -> ActionConfig:
    fields = {
        "kind": ActionKind.CREATE_ISSUE,
        "enabled": True,
        "endpoint_base": "https://gitlab.example.com/",
        "credential": "glpat-secret",
        "project_id": "42",
    }
    fields.update(overrides)
    return ActionConfig(**fields)


def _pipeline_config(**overrides) -> ActionConfig:
    fields = {
        "kind": ActionKind.TRIGGER_PIPELINE,
        "enabled": True,
        "endpoint_base": "https://gitlab.example.com",
        "credential": "trigger-token",
        "project_id": "7",
        "ref": "main",
    }
    fields.update(overrides)
    return ActionConfig(**fields)


def test_create_issue_request() -> None:
    request = ActionPayloadBuilder().build(_context(), MENTION, _issue_config())

    assert isinstance(request, OutboundRequest)
    assert request.method == "POST"
    assert request.url == "https://gitlab.example.com/api/v4/projects/42/issues"
    assert request.headers == {
        "Content-Type": "application/json",
        "Authorization": "Bearer glpat-secret",
    }
    assert request.body == {
        "title": "[backend] Bot Message from dev: ai_qwen",
        "description": "@ai_qwen the build is broken\n  see logs",
        "labels": ["rocketchat-bot", "auto-generated", "channel::dev", "topic::backend"],
    }
    assert json.loads(request.content) == request.body


def test_create_issue_without_topic_and_with_assignee() -> None:
    request = ActionPayloadBuilder().build(
        _context(room_topic=None),
        MENTION,
        _issue_config(),
        assignee_id=99,
    )

    assert request.body["title"] == "Bot Message from dev: ai_qwen"
    assert request.body["labels"] == ["rocketchat-bot", "auto-generated", "channel::dev"]
    assert request.body["assignee_ids"] == [99]


def test_topic_matching_placeholder_text_still_counts_as_topic() -> None:
    request = ActionPayloadBuilder().build(_context(room_topic="no topic set"), MENTION, _issue_config())

    assert request.body["title"] == "[no topic set] Bot Message from dev: ai_qwen"
    assert "topic::no topic set" in request.body["labels"]


def test_create_issue_quotes_project_path_and_strips_label_commas() -> None:
    request = ActionPayloadBuilder().build(
        _context(room_topic="api, infra"),
        MENTION,
        _issue_config(project_id="group/project"),
    )

    assert request.url == "https://gitlab.example.com/api/v4/projects/group%2Fproject/issues"
    assert "topic::api  infra" in request.body["labels"]


def test_trigger_pipeline_request() -> None:
    request = ActionPayloadBuilder().build(_context(), MENTION, _pipeline_config())

    assert request.url == "https://gitlab.example.com/api/v4/projects/7/trigger/pipeline"
    assert request.headers == {"Content-Type": "application/json"}
    assert request.body == {
        "token": "trigger-token",
        "ref": "main",
        "variables": {
            "ROCKETCHAT_MESSAGE": "@ai_qwen the build is broken\n  see logs",
            "ROCKETCHAT_CHANNEL_NAME": "dev",
            "ROCKETCHAT_TOPIC": "backend",
            "ROCKETCHAT_BOT_NAME": "ai_qwen",
            "ROCKETCHAT_MESSAGE_ID": "msg-1",
            "ROCKETCHAT_SENDER": "alice",
        },
    }


def test_missing_metadata_degrades_to_placeholders() -> None:
    context = MessageContext.from_message(InboundMessage(text="@ai_qwen hi"))

    request = ActionPayloadBuilder().build(context, MENTION, _pipeline_config())

    variables = request.body["variables"]
    assert variables["ROCKETCHAT_CHANNEL_NAME"] == "unknown"
    assert variables["ROCKETCHAT_TOPIC"] == "no topic set"
    assert variables["ROCKETCHAT_MESSAGE_ID"] == ""
    assert variables["ROCKETCHAT_SENDER"] == "unknown"
    assert None not in variables.values()
    assert context.room is None


def test_echo_reply() -> None:
    reply = ActionPayloadBuilder().build(
        _context(id=None),
        MENTION,
        ActionConfig(kind=ActionKind.ECHO_REPLY, enabled=True),
    )

    assert isinstance(reply, ChatReply)
    assert reply.text == (
        '🤖 Bot mentioned! Received message: "@ai_qwen the build is broken\n  see logs" '
        "with ID: unknown in #dev (topic: backend)"
    )


def test_disabled_action_builds_nothing() -> None:
    builder = ActionPayloadBuilder()
    assert builder.build(_context(), MENTION, _issue_config(enabled=False)) is None
    assert builder.build(_context(), MENTION, ActionConfig(kind=ActionKind.ECHO_REPLY)) is None


def test_incomplete_config_builds_nothing() -> None:
    builder = ActionPayloadBuilder()
    assert builder.build(_context(), MENTION, _issue_config(credential="")) is None
    assert builder.build(_context(), MENTION, _pipeline_config(ref="  ")) is None


def test_missing_fields_lists_required_settings() -> None:
    config = ActionConfig(kind=ActionKind.TRIGGER_PIPELINE, enabled=True, endpoint_base="https://x")
    assert config.missing_fields() == ["credential", "project_id", "ref"]


def test_build_is_deterministic() -> None:
    builder = ActionPayloadBuilder()
    first = builder.build(_context(), MENTION, _issue_config(), assignee_id=3)
    second = builder.build(_context(), MENTION, _issue_config(), assignee_id=3)

    assert first == second
    assert first.content == second.content


def test_user_lookup_request() -> None:
    request = ActionPayloadBuilder().user_lookup("ai_qwen", _issue_config())

    assert request.method == "GET"
    assert request.url == "https://gitlab.example.com/api/v4/users"
    assert request.params == {"username": "ai_qwen"}
    assert request.headers["Authorization"] == "Bearer glpat-secret"
    assert request.content is None
